"""Helpers shared by CLI command handlers."""

import logging
import sys

from stackdock.stack import load_stack

logger = logging.getLogger(__name__)


def add_stack_arguments(parser):
    """--stack and --env, used by every command that reads stack.yaml."""
    parser.add_argument("--stack", required=True, help="Path to stack directory (containing stack.yaml)")
    parser.add_argument("--env", default=None, help="Environment overlay from stack.yaml (e.g. staging)")


def load_stack_or_exit(args, validate=True):
    """Load the stack named by --stack/--env; log and exit 1 on any problem."""
    try:
        return load_stack(args.stack, environment=args.env, validate=validate)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)
