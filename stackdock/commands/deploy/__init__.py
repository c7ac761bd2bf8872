"""Shared deploy CLI pieces: common arguments and the post-deploy check."""

import asyncio
import logging

from stackdock.commands.common import add_stack_arguments
from stackdock.deploy.check import check_routes

logger = logging.getLogger(__name__)


def add_deploy_arguments(parser):
    """Arguments common to every deploy target."""
    add_stack_arguments(parser)
    parser.add_argument("--tag", default="latest", help="Image tag for built services")
    parser.add_argument(
        "--service",
        action="append",
        default=None,
        help="Service allowed to be recreated (repeatable; default: all built services)",
    )
    parser.add_argument("--prune", action="store_true", help="Remove dangling images after a successful apply")
    parser.add_argument("--check", action="store_true", help="Probe every route through the proxy afterwards")
    parser.add_argument("--teardown", action="store_true", help="Stop containers instead of deploying")
    parser.add_argument("--dry-run", action="store_true", help="Print commands without executing")


def run_route_check(stack, host, dry_run=False):
    """Probe routes through the proxy; returns True when all pass."""
    if dry_run:
        for route in stack.routes:
            logger.info(f"[dry-run] GET http://{host}:{stack.listen}{route.path}")
        return True
    logger.info("\nChecking routes...")
    ok, _ = asyncio.run(check_routes(stack, host))
    return ok
