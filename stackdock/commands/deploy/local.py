"""Local deploy target: runs docker compose in the stack directory."""

import asyncio
import os
import sys

from stackdock.commands.common import load_stack_or_exit
from stackdock.commands.deploy import add_deploy_arguments, run_route_check
from stackdock.deploy.local import make_run_cmd, make_write_file
from stackdock.deploy.orchestrate import run_deploy, run_teardown


def handle_local(args):
    """Handle the local deploy target."""
    stack = load_stack_or_exit(args)
    prune = args.prune or stack.deploy.prune

    # Deploy directory is the stack directory itself
    deploy_dir = os.path.abspath(args.stack)

    run_cmd = make_run_cmd(deploy_dir, dry_run=args.dry_run)
    write_file = make_write_file(deploy_dir, dry_run=args.dry_run)

    if args.teardown:
        if not asyncio.run(run_teardown(run_cmd)):
            sys.exit(1)
        return

    success = asyncio.run(
        run_deploy(
            run_cmd=run_cmd,
            write_file=write_file,
            stack=stack,
            host="localhost",
            tag=args.tag,
            targets=args.service,
            prune=prune,
            dry_run=args.dry_run,
        )
    )
    if success and args.check:
        success = run_route_check(stack, "localhost", dry_run=args.dry_run)

    if not success:
        sys.exit(1)


def register_local_target(subparsers):
    """Register the local deploy target."""
    parser = subparsers.add_parser("local", help="Deploy locally via docker compose")
    add_deploy_arguments(parser)
    parser.set_defaults(func=handle_local)
