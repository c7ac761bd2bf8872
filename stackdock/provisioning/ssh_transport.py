"""SSH transport: run commands and write files on remote servers via SSH/SCP."""

import logging
import os
import tempfile

from stackdock.provisioning.shell import run_process

logger = logging.getLogger(__name__)

REMOTE_DEPLOY_DIR = "~/app"

# Never prompt; host keys are not pinned
_NON_INTERACTIVE = [
    "-o", "StrictHostKeyChecking=no",
    "-o", "UserKnownHostsFile=/dev/null",
    "-o", "BatchMode=yes",
]


def _identity_args(ssh_key, ssh_port, port_flag):
    args = []
    if ssh_key:
        args += ["-i", os.path.expanduser(ssh_key)]
    if ssh_port and ssh_port != 22:
        args += [port_flag, str(ssh_port)]
    return args


def ssh_base_args(server, ssh_key, ssh_port):
    """ssh argv up to and including the destination."""
    keepalive = ["-o", "ServerAliveInterval=60", "-o", "ServerAliveCountMax=5"]
    return ["ssh", *_NON_INTERACTIVE, *keepalive, *_identity_args(ssh_key, ssh_port, "-p"), server]


def remote_command(command, remote_dir=REMOTE_DEPLOY_DIR):
    """Wrap `command` to run inside remote_dir; docker commands run under the docker group."""
    if command.strip().startswith("docker"):
        escaped = command.replace('"', '\\"')
        return f'sg docker -c "cd {remote_dir} && {escaped}"'
    return f"cd {remote_dir} && {command}"


def make_run_cmd(server, ssh_key, ssh_port, remote_dir=REMOTE_DEPLOY_DIR, dry_run=False):
    """Create a run_cmd callable for SSH execution inside remote_dir."""

    async def run_cmd(command, stream=True, timeout=600, log_output=False):
        full_cmd = remote_command(command, remote_dir)
        if dry_run:
            logger.info(f"[dry-run] ssh {server}: {full_cmd}")
            return 0, "", ""
        ssh_args = ssh_base_args(server, ssh_key, ssh_port) + [full_cmd]
        return await run_process(ssh_args, stream=stream, timeout=timeout, log_output=log_output)

    return run_cmd


async def scp_file(local_path, server, ssh_key, ssh_port, remote_path, timeout=300):
    """Copy a file to the remote server. Returns (returncode, stderr)."""
    scp_args = ["scp", *_NON_INTERACTIVE, *_identity_args(ssh_key, ssh_port, "-P"), local_path, f"{server}:{remote_path}"]
    rc, _, stderr = await run_process(scp_args, stream=False, timeout=timeout)
    return rc, stderr


def make_write_file(server, ssh_key, ssh_port, remote_dir=REMOTE_DEPLOY_DIR, dry_run=False):
    """Create a write_file callable that SCPs files into remote_dir.

    The callable returns True on success so callers can abort before
    touching containers when a config file did not arrive.
    """

    async def write_file(path, content):
        remote_path = f"{remote_dir}/{path}"
        if dry_run:
            logger.info(f"[dry-run] scp {path} -> {server}:{remote_path}")
            return True

        with tempfile.NamedTemporaryFile(mode="w", suffix=f"_{os.path.basename(path)}", delete=False) as f:
            f.write(content)
            tmp_path = f.name

        try:
            rc, stderr = await scp_file(tmp_path, server, ssh_key, ssh_port, remote_path)
            if rc != 0:
                logger.error(f"Failed to SCP {path} to {server}:{remote_path}: {stderr}")
                return False
            return True
        finally:
            os.unlink(tmp_path)

    return write_file
