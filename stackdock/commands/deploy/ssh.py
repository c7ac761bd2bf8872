"""SSH deploy target: writes config via SCP and applies it over SSH."""

import asyncio
import sys

from stackdock.commands.common import load_stack_or_exit
from stackdock.commands.deploy import add_deploy_arguments, run_route_check
from stackdock.deploy.orchestrate import deploy, teardown
from stackdock.deploy.params import DeployParams


def handle_ssh(args):
    """Handle the SSH deploy target."""
    stack = load_stack_or_exit(args)
    if args.remote_dir:
        stack.deploy.remote_dir = args.remote_dir

    params = DeployParams(
        server=args.server,
        ssh_key=args.ssh_key,
        ssh_port=args.ssh_port,
        stack=stack,
        tag=args.tag,
        targets=args.service,
        prune=args.prune or stack.deploy.prune,
        dry_run=args.dry_run,
    )

    if args.teardown:
        if not asyncio.run(teardown(params)):
            sys.exit(1)
        return

    success = asyncio.run(deploy(params))
    if success and args.check:
        success = run_route_check(stack, params.host, dry_run=args.dry_run)

    if not success:
        sys.exit(1)


def register_ssh_target(subparsers):
    """Register the SSH deploy target."""
    parser = subparsers.add_parser("ssh", help="Deploy via SSH to a remote server")
    add_deploy_arguments(parser)
    parser.add_argument("--server", required=True, help="SSH address (user@host)")
    parser.add_argument("--ssh-key", default="~/.ssh/id_ed25519", help="SSH key path")
    parser.add_argument("--ssh-port", type=int, default=22, help="SSH port")
    parser.add_argument("--remote-dir", default=None, help="Stack directory on the server (default: deploy.remote_dir)")
    parser.set_defaults(func=handle_ssh)
