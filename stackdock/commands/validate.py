"""Validate command: structural checks on stack.yaml."""

import logging
import sys

from stackdock.commands.common import add_stack_arguments, load_stack_or_exit
from stackdock.stack import stack_errors, startup_order

logger = logging.getLogger(__name__)


def handle_validate(args):
    """Handle the validate command."""
    stack = load_stack_or_exit(args, validate=False)
    errors = stack_errors(stack)
    if errors:
        logger.error(f"{args.stack}: {len(errors)} problem(s)")
        for error in errors:
            logger.error(f"  - {error}")
        sys.exit(1)

    logger.info(f"{args.stack}: OK")
    logger.info(f"Startup order: {' -> '.join(startup_order(stack.dependency_edges))}")
    for route in stack.routes:
        logger.info(f"Route: {route.path} -> {route.upstream}")


def register_validate_command(subparsers):
    """Register the validate subcommand."""
    parser = subparsers.add_parser("validate", help="Check dependencies, routes and volumes in stack.yaml")
    add_stack_arguments(parser)
    parser.set_defaults(func=handle_validate)
