"""Local transport: docker compose in the stack directory on this machine."""

import logging
import os
import tempfile

from stackdock.provisioning.shell import run_process

logger = logging.getLogger(__name__)


def make_run_cmd(deploy_dir, dry_run=False):
    """Create a run_cmd callable that runs shell commands in deploy_dir."""

    async def run_cmd(command, stream=True, timeout=600, log_output=False):
        if dry_run:
            logger.info(f"[dry-run] {command}")
            return 0, "", ""
        return await run_process(command, cwd=deploy_dir, stream=stream, timeout=timeout, log_output=log_output)

    return run_cmd


def make_write_file(deploy_dir, dry_run=False):
    """Create a write_file callable for deploy_dir.

    Files are written to a sibling temp file and renamed into place, so a
    failed write leaves the previous compose/nginx config intact and the
    callable returns False.
    """

    async def write_file(path, content):
        full_path = os.path.join(deploy_dir, path)
        if dry_run:
            logger.info(f"[dry-run] write {full_path}")
            return True

        target_dir = os.path.dirname(full_path) or "."
        tmp_path = None
        try:
            os.makedirs(target_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=target_dir, prefix=f".{os.path.basename(path)}.")
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.replace(tmp_path, full_path)
        except OSError as e:
            logger.error(f"Failed to write {full_path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            return False
        return True

    return write_file
