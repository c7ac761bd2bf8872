"""Bootstrap command: prepare a fresh host and run the first apply."""

import asyncio
import sys

from stackdock.commands.common import add_stack_arguments, load_stack_or_exit
from stackdock.provisioning.remote import provision_remote


def handle_bootstrap(args):
    """Handle the bootstrap command."""
    stack = load_stack_or_exit(args)
    repository = args.repository or stack.deploy.repository
    remote_dir = args.remote_dir or stack.deploy.remote_dir

    ok = asyncio.run(
        provision_remote(
            args.server,
            args.ssh_key,
            args.ssh_port,
            repository=repository,
            remote_dir=remote_dir,
            dry_run=args.dry_run,
        )
    )
    if not ok:
        sys.exit(1)


def register_bootstrap_command(subparsers):
    """Register the bootstrap subcommand."""
    parser = subparsers.add_parser(
        "bootstrap",
        help="Install Docker, clone the repository and start the stack on a new server",
    )
    add_stack_arguments(parser)
    parser.add_argument("--server", required=True, help="SSH address (user@host)")
    parser.add_argument("--ssh-key", default="~/.ssh/id_ed25519", help="SSH key path")
    parser.add_argument("--ssh-port", type=int, default=22, help="SSH port")
    parser.add_argument("--repository", default=None, help="Git URL to clone (default: deploy.repository)")
    parser.add_argument("--remote-dir", default=None, help="Checkout directory (default: deploy.remote_dir)")
    parser.add_argument("--dry-run", action="store_true", help="Print commands without executing")
    parser.set_defaults(func=handle_bootstrap)
