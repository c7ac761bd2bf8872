"""Pipeline command: show or run the build/push/deploy sequence locally."""

import asyncio
import logging
import os
import sys
import tempfile

from stackdock.commands.common import add_stack_arguments, load_stack_or_exit
from stackdock.pipeline import PipelineParams, build_pipeline, run_pipeline, uncommitted_changes
from stackdock.redact import register_secret

logger = logging.getLogger(__name__)


def _secret(stack, key, override=None):
    """CLI value if given, else the env var the stack names for `key`."""
    if override:
        return override
    return os.environ.get(stack.pipeline.secrets[key], "")


def _resolve_server(stack, args):
    if args.server:
        return args.server
    host = _secret(stack, "host")
    user = _secret(stack, "username")
    if not host:
        return ""
    return f"{user}@{host}" if user else host


def _resolve_ssh_key(stack, args):
    """Key path from --ssh-key, else key material from the environment written to a 0600 temp file."""
    if args.ssh_key:
        return args.ssh_key, None
    material = _secret(stack, "ssh_key")
    if not material:
        return "~/.ssh/id_ed25519", None
    register_secret(material)
    fd, path = tempfile.mkstemp(prefix="stackdock_key_")
    with os.fdopen(fd, "w") as f:
        f.write(material if material.endswith("\n") else material + "\n")
    os.chmod(path, 0o600)
    return path, path


def _make_params(stack, args, ssh_key):
    password = _secret(stack, "registry_password", args.registry_password)
    register_secret(password)
    return PipelineParams(
        registry_username=_secret(stack, "registry_username", args.registry_username),
        registry_password=password,
        server=_resolve_server(stack, args),
        ssh_key=ssh_key,
        ssh_port=args.ssh_port,
        tag=args.tag,
        dry_run=getattr(args, "dry_run", False),
    )


def handle_show(args):
    """List the pipeline steps in execution order."""
    stack = load_stack_or_exit(args)
    params = _make_params(stack, args, args.ssh_key or "~/.ssh/id_ed25519")
    for i, step in enumerate(build_pipeline(stack, params), 1):
        logger.info(f"{i}. {step.name}: {step.describe()}")


def handle_run(args):
    """Run the pipeline: checkout, login, builds, pushes, remote deploy."""
    stack = load_stack_or_exit(args)
    workdir = os.path.abspath(args.workdir)
    if not args.dry_run and not args.force:
        changes = asyncio.run(uncommitted_changes(workdir))
        if changes:
            logger.error(f"{workdir} has uncommitted changes the checkout step would discard:")
            for line in changes:
                logger.error(f"  {line}")
            logger.error("Commit or stash them, or pass --force.")
            sys.exit(1)

    ssh_key, tmp_key = _resolve_ssh_key(stack, args)
    try:
        params = _make_params(stack, args, ssh_key)
        missing = [
            name for name, value in (
                ("registry username", params.registry_username),
                ("registry password", params.registry_password),
                ("server", params.server),
            ) if not value
        ]
        if missing and not args.dry_run:
            logger.error(f"Missing pipeline secrets: {', '.join(missing)}")
            sys.exit(1)

        steps = build_pipeline(stack, params)
        result = asyncio.run(run_pipeline(steps, dry_run=args.dry_run, cwd=workdir))
    finally:
        if tmp_key:
            os.unlink(tmp_key)

    for step_result in result.results:
        logger.info(f"  {step_result.name:<16} {step_result.status}")
    if not result.success:
        sys.exit(1)


def _add_secret_arguments(parser):
    parser.add_argument("--registry-username", default=None, help="Registry user (default: $DOCKER_USERNAME)")
    parser.add_argument("--registry-password", default=None, help="Registry password (default: $DOCKER_PASSWORD)")
    parser.add_argument("--server", default=None, help="SSH address user@host (default: $SERVER_USER@$SERVER_HOST)")
    parser.add_argument("--ssh-key", default=None, help="SSH key path (default: $SERVER_SSH_KEY contents, else ~/.ssh/id_ed25519)")
    parser.add_argument("--ssh-port", type=int, default=22, help="SSH port")
    parser.add_argument("--tag", default="latest", help="Image tag to build, push and deploy")


def register_pipeline_command(subparsers):
    """Register the pipeline subcommand with show/run actions."""
    parser = subparsers.add_parser("pipeline", help="Show or run the build/push/deploy pipeline")
    actions = parser.add_subparsers(dest="action", required=True)

    show = actions.add_parser("show", help="List pipeline steps")
    add_stack_arguments(show)
    _add_secret_arguments(show)
    show.set_defaults(func=handle_show)

    run = actions.add_parser("run", help="Execute pipeline steps in order, stopping at the first failure")
    add_stack_arguments(run)
    _add_secret_arguments(run)
    run.add_argument("--workdir", default=".", help="Repository checkout to build from")
    run.add_argument("--dry-run", action="store_true", help="Print commands without executing")
    run.add_argument("--force", action="store_true", help="Run even if --workdir has uncommitted changes (they are discarded)")
    run.set_defaults(func=handle_run)
