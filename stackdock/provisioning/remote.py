"""Remote server bootstrap: install Docker, clone the repository, first apply."""

import logging

from stackdock.provisioning.shell import run_process
from stackdock.provisioning.ssh_transport import REMOTE_DEPLOY_DIR, ssh_base_args

logger = logging.getLogger(__name__)


async def provision_remote(server, ssh_key, ssh_port, repository="", remote_dir=REMOTE_DEPLOY_DIR, dry_run=False):
    """Bring a fresh host to the state the pipeline's remote-deploy step expects.

    Steps (each checks before acting):
    1. Install Docker if not found
    2. Add user to docker group
    3. Clone the repository into remote_dir, or fast-forward it if present
       (without a repository, just create remote_dir)
    4. docker compose up -d

    Returns True when every step succeeded.
    """

    async def _run_ssh(command, timeout=600):
        rc, _, stderr = await run_process(ssh_base_args(server, ssh_key, ssh_port) + [command], stream=False, timeout=timeout)
        if rc != 0 and stderr:
            logger.error(f"SSH error ({server}): {stderr.strip()}")
        return rc

    if repository:
        checkout_cmd = (
            f"if [ -d {remote_dir}/.git ]; then git -C {remote_dir} pull --ff-only;"
            f" else git clone {repository} {remote_dir}; fi"
        )
    else:
        checkout_cmd = f"mkdir -p {remote_dir}"
    up_cmd = f'sg docker -c "cd {remote_dir} && docker compose up -d"'

    if dry_run:
        logger.info(f"[dry-run] ssh {server}: install docker (if not present)")
        logger.info(f"[dry-run] ssh {server}: add user to docker group")
        logger.info(f"[dry-run] ssh {server}: {checkout_cmd}")
        logger.info(f"[dry-run] ssh {server}: {up_cmd}")
        return True

    # 1. Install Docker if not found
    rc = await _run_ssh("command -v docker")
    if rc != 0:
        logger.info("Installing Docker...")
        rc = await _run_ssh("curl -fsSL https://get.docker.com | sudo sh", timeout=1200)
        if rc != 0:
            logger.error("Failed to install Docker")
            return False

    # 2. Add user to docker group
    await _run_ssh("groups | grep -q docker || sudo usermod -aG docker $(whoami)")

    # 3. Repository checkout
    logger.info(f"Preparing {remote_dir}...")
    rc = await _run_ssh(checkout_cmd)
    if rc != 0:
        logger.error(f"Failed to prepare {remote_dir}")
        return False

    # 4. First apply
    logger.info("Starting services...")
    rc = await _run_ssh(up_cmd, timeout=1800)
    if rc != 0:
        logger.error("Failed to start services")
        return False

    logger.info("Bootstrap complete.")
    return True
