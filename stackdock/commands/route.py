"""Route command: show which upstream serves a request path."""

import logging
import sys

from stackdock.commands.common import add_stack_arguments, load_stack_or_exit
from stackdock.routing import resolve_route

logger = logging.getLogger(__name__)


def handle_route(args):
    """Handle the route command."""
    stack = load_stack_or_exit(args)
    unmatched = False
    for path in args.paths:
        route = resolve_route(stack.routes, path)
        if route is None:
            logger.error(f"{path} -> (no route)")
            unmatched = True
        else:
            logger.info(f"{path} -> {route.upstream} (location {route.path})")
    if unmatched:
        sys.exit(1)


def register_route_command(subparsers):
    """Register the route subcommand."""
    parser = subparsers.add_parser("route", help="Resolve request paths to proxy upstreams")
    add_stack_arguments(parser)
    parser.add_argument("paths", nargs="+", help="Request paths, e.g. /api/tutorials")
    parser.set_defaults(func=handle_route)
