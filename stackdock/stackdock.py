#!/usr/bin/env python3
"""Stack deploy tools: CLI entrypoint."""

import argparse

from stackdock.commands.bootstrap import register_bootstrap_command
from stackdock.commands.deploy.local import register_local_target
from stackdock.commands.deploy.ssh import register_ssh_target
from stackdock.commands.pipeline import register_pipeline_command
from stackdock.commands.render import register_render_command
from stackdock.commands.route import register_route_command
from stackdock.commands.validate import register_validate_command
from stackdock.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Stack deploy tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # deploy subcommand with target sub-subcommands
    deploy_parser = subparsers.add_parser("deploy", help="Apply the stack on a host")
    deploy_subparsers = deploy_parser.add_subparsers(dest="target", required=True)

    register_local_target(deploy_subparsers)
    register_ssh_target(deploy_subparsers)

    register_validate_command(subparsers)
    register_route_command(subparsers)
    register_render_command(subparsers)
    register_pipeline_command(subparsers)
    register_bootstrap_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
