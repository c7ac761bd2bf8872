"""Remote hosts: SSH transport, shell helpers, bootstrap."""

from stackdock.provisioning.remote import provision_remote
from stackdock.provisioning.shell import run_process, run_shell_cmd
from stackdock.provisioning.ssh_transport import (
    REMOTE_DEPLOY_DIR,
    make_run_cmd,
    make_write_file,
    remote_command,
    scp_file,
    ssh_base_args,
)

__all__ = [
    "REMOTE_DEPLOY_DIR",
    "make_run_cmd",
    "make_write_file",
    "provision_remote",
    "remote_command",
    "run_process",
    "run_shell_cmd",
    "scp_file",
    "ssh_base_args",
]
