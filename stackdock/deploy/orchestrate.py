"""Deploy orchestration: run_deploy, run_teardown, deploy, teardown."""

import logging

from stackdock.deploy.params import DeployParams
from stackdock.deploy.plan import ServiceState, plan_recreate
from stackdock.provisioning.ssh_transport import make_run_cmd, make_write_file
from stackdock.render import COMPOSE_FILE, NGINX_FILE, generate_compose, generate_nginx_conf
from stackdock.stack.graph import dependents
from stackdock.stack.types import Stack

logger = logging.getLogger(__name__)


async def inspect_states(run_cmd, stack: Stack, tag="latest"):
    """Read container and image IDs for every service on the target.

    A failing `docker inspect` means the container does not exist. Empty
    output (e.g. dry-run) leaves the IDs unknown.
    """
    states = {}
    for svc in stack.services:
        rc, out, _ = await run_cmd(
            f"docker inspect --format '{{{{.State.Running}}}} {{{{.Image}}}}' {svc.container_name}",
            stream=False,
            timeout=60,
        )
        if rc != 0:
            states[svc.name] = ServiceState(svc.name, running=False)
            continue
        fields = out.split()
        running = fields[0] != "false" if fields else True
        container_image = fields[1] if len(fields) > 1 else ""

        rc, out, _ = await run_cmd(
            f"docker image inspect --format '{{{{.Id}}}}' {stack.image_for(svc, tag)}",
            stream=False,
            timeout=60,
        )
        latest_image = out.strip() if rc == 0 else ""
        states[svc.name] = ServiceState(svc.name, container_image, latest_image, running)
    return states


async def run_deploy(run_cmd, write_file, stack: Stack, host, tag="latest", targets=None, prune=False, dry_run=False):
    """Shared apply orchestration: pull, then recreate only what changed.

    Args:
        run_cmd: async callable(command, stream=True, timeout=600, log_output=False) -> (returncode, stdout, stderr)
        write_file: async callable(path, content) -> bool - writes file to target
        stack: resolved Stack dataclass
        host: hostname/IP for endpoint display
        tag: image tag for built services
        targets: services allowed to be recreated (default: built services)
        prune: remove dangling images after a successful apply
        dry_run: only affects the status line; transports handle the rest
    """
    if targets is None:
        targets = [svc.name for svc in stack.app_services]
    unknown = [t for t in targets if t not in stack.service_names]
    if unknown:
        logger.error(f"Unknown service(s): {', '.join(unknown)}")
        return False

    # Generate and write compose file (and nginx config when routes exist)
    if await write_file(COMPOSE_FILE, generate_compose(stack, tag)) is False:
        return False
    if stack.routes and await write_file(NGINX_FILE, generate_nginx_conf(stack)) is False:
        return False

    # Step 1: Pull images. A failed pull leaves every container as it was.
    names = " ".join(targets)
    logger.info("Pulling images...")
    rc, _, _ = await run_cmd(f"docker compose pull {names}", timeout=1800, log_output=True)
    if rc != 0:
        logger.error("Failed to pull images; no containers were recreated")
        return False

    # Step 2: Compare running containers against pulled images
    states = await inspect_states(run_cmd, stack, tag)
    plan = plan_recreate(stack, states, targets)

    # Step 3: Start services that have no container yet
    if plan.start:
        logger.info(f"Starting {', '.join(plan.start)}...")
        rc, _, _ = await run_cmd(f"docker compose up -d --no-recreate {' '.join(plan.start)}", timeout=1800, log_output=True)
        if rc != 0:
            logger.error("Failed to start services")
            await run_cmd("docker compose logs --tail=100", timeout=60, log_output=True)
            return False

    # Step 4: Recreate changed services without touching their dependencies
    if plan.recreate:
        logger.info(f"Recreating {', '.join(plan.recreate)}...")
        rc, _, _ = await run_cmd(f"docker compose up -d --no-deps {' '.join(plan.recreate)}", timeout=1800, log_output=True)
        if rc != 0:
            logger.error("Failed to recreate services")
            await run_cmd("docker compose logs --tail=100", timeout=60, log_output=True)
            return False
        # --no-deps leaves dependents on their existing containers
        edges = stack.dependency_edges
        for name in plan.recreate:
            kept = [svc for svc in plan.keep if svc in dependents(edges, name)]
            if kept:
                logger.info(f"{name} recreated; dependents left running: {', '.join(kept)}")

    if plan.is_noop:
        logger.info("All services up to date; nothing to recreate.")

    # Step 5: Optional cleanup of dangling images. Named volumes are never pruned.
    if prune:
        logger.info("Pruning dangling images...")
        rc, _, _ = await run_cmd("docker image prune -f", timeout=300, log_output=True)
        if rc != 0:
            logger.warning("Image prune failed; deployment itself succeeded")

    status = "dry-run (not deployed)" if dry_run else "deployed"
    logger.info(f"\nEndpoint: http://{host}:{stack.listen}/")
    logger.info(f"Started: {', '.join(plan.start) or '-'}")
    logger.info(f"Recreated: {', '.join(plan.recreate) or '-'}")
    logger.info(f"Unchanged: {', '.join(plan.keep) or '-'}")
    logger.info(f"Status: {status}")
    return True


async def run_teardown(run_cmd):
    """Tear down: docker compose down. Named volumes are kept."""
    logger.info("Tearing down...")
    rc, _, _ = await run_cmd("docker compose down", timeout=300, log_output=True)
    if rc == 0:
        logger.info("Teardown complete.")
    else:
        logger.error("Teardown failed.")
    return rc == 0


def _transports(params: DeployParams):
    remote_dir = params.stack.deploy.remote_dir
    run_cmd = make_run_cmd(params.server, params.ssh_key, params.ssh_port, remote_dir=remote_dir, dry_run=params.dry_run)
    write_file = make_write_file(params.server, params.ssh_key, params.ssh_port, remote_dir=remote_dir, dry_run=params.dry_run)
    return run_cmd, write_file


async def deploy(params: DeployParams) -> bool:
    """Apply a stack on a server via SSH. Single entry point."""
    run_cmd, write_file = _transports(params)
    return await run_deploy(
        run_cmd,
        write_file,
        params.stack,
        params.host,
        tag=params.tag,
        targets=params.targets,
        prune=params.prune,
        dry_run=params.dry_run,
    )


async def teardown(params: DeployParams) -> bool:
    """Teardown containers on a server."""
    run_cmd, _ = _transports(params)
    return await run_teardown(run_cmd)
