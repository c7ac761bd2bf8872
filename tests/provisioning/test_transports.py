"""Tests for the process runner and the local/SSH transports."""

import asyncio
import os
import sys

from stackdock.deploy.local import make_run_cmd, make_write_file
from stackdock.provisioning import remote_command, run_process, run_shell_cmd, ssh_base_args


def test_run_process_captures_argv_output():
    rc, out, err = asyncio.run(run_process([sys.executable, "-c", "print('hello')"], stream=False))
    assert rc == 0
    assert out.strip() == "hello"
    assert err == ""


def test_run_process_log_output_collects_lines():
    code = "import sys; print('a'); print('b'); print('oops', file=sys.stderr)"
    rc, out, err = asyncio.run(run_process([sys.executable, "-c", code], log_output=True))
    assert rc == 0
    assert out == "a\nb"
    assert err == "oops"


def test_run_process_feeds_stdin():
    code = "import sys; print(sys.stdin.read().upper())"
    rc, out, _ = asyncio.run(run_process([sys.executable, "-c", code], stream=False, stdin="secret"))
    assert rc == 0
    assert out.strip() == "SECRET"


def test_run_process_missing_binary():
    rc, _, err = asyncio.run(run_process(["stackdock-no-such-binary"], stream=False))
    assert rc == 1
    assert "not found" in err


def test_run_process_timeout_kills():
    rc, _, err = asyncio.run(run_process([sys.executable, "-c", "import time; time.sleep(30)"], stream=False, timeout=0.5))
    assert rc == 1
    assert err == "timeout"


def test_run_shell_cmd_dry_run_does_not_execute(tmp_path):
    marker = tmp_path / "ran"
    rc, _, _ = asyncio.run(run_shell_cmd(["touch", str(marker)], dry_run=True))
    assert rc == 0
    assert not marker.exists()


def test_local_run_cmd_uses_deploy_dir(tmp_path):
    run_cmd = make_run_cmd(str(tmp_path))
    rc, out, _ = asyncio.run(run_cmd("pwd", stream=False))
    assert rc == 0
    assert os.path.realpath(out.strip()) == os.path.realpath(str(tmp_path))


def test_local_write_file_replaces_content(tmp_path):
    write_file = make_write_file(str(tmp_path))
    assert asyncio.run(write_file("docker-compose.yaml", "old"))
    assert asyncio.run(write_file("docker-compose.yaml", "new"))
    assert (tmp_path / "docker-compose.yaml").read_text() == "new"
    assert os.listdir(tmp_path) == ["docker-compose.yaml"]


def test_local_write_file_failure_returns_false(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    write_file = make_write_file(str(blocker))
    assert asyncio.run(write_file("docker-compose.yaml", "services:\n")) is False


def test_local_write_file_dry_run(tmp_path):
    write_file = make_write_file(str(tmp_path), dry_run=True)
    assert asyncio.run(write_file("nginx.conf", "server {}"))
    assert os.listdir(tmp_path) == []


def test_remote_command_wraps_docker_in_group():
    assert remote_command("docker compose pull backend", "~/app") == 'sg docker -c "cd ~/app && docker compose pull backend"'
    assert remote_command("ls", "~/app") == "cd ~/app && ls"


def test_ssh_base_args_key_and_port():
    args = ssh_base_args("deploy@host", "~/.ssh/id_ed25519", 2222)
    assert args[0] == "ssh"
    assert args[-1] == "deploy@host"
    assert args[args.index("-p") + 1] == "2222"
    assert args[args.index("-i") + 1] == os.path.expanduser("~/.ssh/id_ed25519")
    assert "-p" not in ssh_base_args("deploy@host", "", 22)
