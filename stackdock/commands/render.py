"""Render command: write Dockerfiles, compose, nginx and workflow files."""

import logging
import os

from stackdock.commands.common import add_stack_arguments, load_stack_or_exit
from stackdock.render import render_all

logger = logging.getLogger(__name__)


def handle_render(args):
    """Handle the render command."""
    stack = load_stack_or_exit(args)
    output_dir = os.path.abspath(args.output or args.stack)

    for rel_path, content in render_all(stack, tag=args.tag).items():
        full_path = os.path.join(output_dir, rel_path)
        if args.dry_run:
            logger.info(f"[dry-run] write {full_path}")
            continue
        if os.path.exists(full_path) and not args.force:
            logger.info(f"skip {full_path} (exists, use --force to overwrite)")
            continue
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w") as f:
            f.write(content)
        logger.info(f"wrote {full_path}")


def register_render_command(subparsers):
    """Register the render subcommand."""
    parser = subparsers.add_parser("render", help="Generate deployment artifacts from stack.yaml")
    add_stack_arguments(parser)
    parser.add_argument("--output", default=None, help="Output directory (default: the stack directory)")
    parser.add_argument("--tag", default="latest", help="Image tag for built services")
    parser.add_argument("--force", action="store_true", help="Overwrite existing files")
    parser.add_argument("--dry-run", action="store_true", help="List files without writing them")
    parser.set_defaults(func=handle_render)
