"""Unit tests for deploy orchestration with a recording transport."""

import asyncio
import logging

from stackdock.deploy import inspect_states, run_deploy, run_teardown


def _inspect_responses(stack, changed=(), missing=(), stopped=()):
    """Fake `docker inspect` output: every container current and running unless listed."""
    responses = {}
    for svc in stack.services:
        ref = stack.image_for(svc)
        if svc.name in missing:
            responses[f"}}}}' {svc.container_name}"] = (1, "", "No such object")
            continue
        container_image = f"sha256:old-{svc.name}" if svc.name in changed else f"sha256:{svc.name}"
        running = "false" if svc.name in stopped else "true"
        responses[f"{{{{.Image}}}}' {svc.container_name}"] = (0, f"{running} {container_image}\n", "")
        responses[f"{{{{.Id}}}}' {ref}"] = (0, f"sha256:{svc.name}\n", "")
    return responses


def _deploy(stack, run_cmd, write_file, **kwargs):
    return asyncio.run(run_deploy(run_cmd, write_file, stack, "10.0.0.5", **kwargs))


def test_writes_compose_and_nginx(sample_stack, fake_run_cmd, fake_write_file):
    assert _deploy(sample_stack, fake_run_cmd(_inspect_responses(sample_stack)), fake_write_file)
    assert set(fake_write_file.files) == {"docker-compose.yaml", "nginx.conf"}
    assert "location /api" in fake_write_file.files["nginx.conf"]


def test_reapply_without_changes_is_noop(sample_stack, fake_run_cmd, fake_write_file):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack))
    assert _deploy(sample_stack, run_cmd, fake_write_file)
    assert run_cmd.ran("docker compose pull backend frontend")
    assert run_cmd.ran("docker compose up") == []


def test_only_backend_changed_recreates_backend(sample_stack, fake_run_cmd, fake_write_file):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack, changed=("backend",)))
    assert _deploy(sample_stack, run_cmd, fake_write_file)
    assert run_cmd.ran("docker compose up") == ["docker compose up -d --no-deps backend"]


def test_stopped_backend_with_new_image_is_recreated(sample_stack, fake_run_cmd, fake_write_file):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack, changed=("backend",), stopped=("backend",)))
    assert _deploy(sample_stack, run_cmd, fake_write_file)
    assert run_cmd.ran("docker compose up") == ["docker compose up -d --no-deps backend"]


def test_stopped_current_container_is_restarted(sample_stack, fake_run_cmd, fake_write_file):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack, stopped=("database",)))
    assert _deploy(sample_stack, run_cmd, fake_write_file)
    assert run_cmd.ran("docker compose up") == ["docker compose up -d --no-recreate database"]


def test_recreate_reports_dependents_left_running(sample_stack, fake_run_cmd, fake_write_file, caplog):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack, changed=("backend",)))
    with caplog.at_level(logging.INFO):
        assert _deploy(sample_stack, run_cmd, fake_write_file)
    assert "backend recreated; dependents left running: frontend, proxy" in caplog.text


def test_pull_failure_aborts_before_recreate(sample_stack, fake_run_cmd, fake_write_file):
    responses = _inspect_responses(sample_stack, changed=("backend", "frontend"))
    responses = {"docker compose pull": (1, "", "manifest unknown"), **responses}
    run_cmd = fake_run_cmd(responses)
    assert not _deploy(sample_stack, run_cmd, fake_write_file)
    assert run_cmd.ran("docker compose up") == []
    assert run_cmd.ran("docker inspect") == []


def test_failed_config_upload_aborts(sample_stack, fake_run_cmd, failing_write_file):
    run_cmd = fake_run_cmd()
    assert not _deploy(sample_stack, run_cmd, failing_write_file)
    assert run_cmd.commands == []


def test_missing_containers_started_without_recreate(sample_stack, fake_run_cmd, fake_write_file):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack, missing=("database", "proxy")))
    assert _deploy(sample_stack, run_cmd, fake_write_file)
    assert run_cmd.ran("docker compose up") == ["docker compose up -d --no-recreate database proxy"]


def test_recreate_failure_dumps_logs(sample_stack, fake_run_cmd, fake_write_file):
    responses = {"--no-deps": (1, "", "boom"), **_inspect_responses(sample_stack, changed=("frontend",))}
    run_cmd = fake_run_cmd(responses)
    assert not _deploy(sample_stack, run_cmd, fake_write_file)
    assert run_cmd.ran("docker compose logs --tail=100")


def test_prune_is_opt_in(sample_stack, fake_run_cmd, fake_write_file):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack))
    _deploy(sample_stack, run_cmd, fake_write_file)
    assert run_cmd.ran("prune") == []

    run_cmd = fake_run_cmd(_inspect_responses(sample_stack))
    _deploy(sample_stack, run_cmd, fake_write_file, prune=True)
    assert run_cmd.ran("docker image prune -f")
    assert run_cmd.ran("volume prune") == []


def test_prune_failure_does_not_fail_deploy(sample_stack, fake_run_cmd, fake_write_file):
    responses = {"docker image prune": (1, "", ""), **_inspect_responses(sample_stack)}
    assert _deploy(sample_stack, fake_run_cmd(responses), fake_write_file, prune=True)


def test_unknown_target_rejected(sample_stack, fake_run_cmd, fake_write_file):
    run_cmd = fake_run_cmd()
    assert not _deploy(sample_stack, run_cmd, fake_write_file, targets=["cache"])
    assert run_cmd.commands == []
    assert fake_write_file.files == {}


def test_explicit_targets_limit_pull(sample_stack, fake_run_cmd, fake_write_file):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack, changed=("backend", "frontend")))
    assert _deploy(sample_stack, run_cmd, fake_write_file, targets=["frontend"])
    assert run_cmd.ran("docker compose pull") == ["docker compose pull frontend"]
    assert run_cmd.ran("docker compose up") == ["docker compose up -d --no-deps frontend"]


def test_inspect_states_parses_output(sample_stack, fake_run_cmd):
    run_cmd = fake_run_cmd(_inspect_responses(sample_stack, changed=("backend",), missing=("proxy",)))
    states = asyncio.run(inspect_states(run_cmd, sample_stack))
    assert states["backend"].container_image == "sha256:old-backend"
    assert states["backend"].latest_image == "sha256:backend"
    assert states["backend"].outdated
    assert not states["database"].outdated
    assert not states["proxy"].running


def test_inspect_states_stopped_container(sample_stack, fake_run_cmd):
    run_cmd = fake_run_cmd({"{{.Image}}' database": (0, "false sha256:database", "")})
    states = asyncio.run(inspect_states(run_cmd, sample_stack))
    assert not states["database"].running


def test_teardown(fake_run_cmd):
    run_cmd = fake_run_cmd()
    assert asyncio.run(run_teardown(run_cmd))
    assert run_cmd.commands == ["docker compose down"]


def test_teardown_failure(fake_run_cmd):
    run_cmd = fake_run_cmd({"down": (1, "", "")})
    assert not asyncio.run(run_teardown(run_cmd))
