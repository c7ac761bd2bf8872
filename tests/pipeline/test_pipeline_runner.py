"""Unit tests for the sequential, fail-fast pipeline runner."""

import asyncio
import logging

from stackdock.pipeline import FAILED, OK, SKIPPED, PipelineParams, Step, build_pipeline, run_pipeline


class FakeShell:
    """Records argv lists; commands containing `fail_on` exit 1."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.calls = []

    async def __call__(self, command, dry_run=False, stdin=None, cwd=None):
        self.calls.append((command, stdin))
        joined = " ".join(command)
        if self.fail_on and self.fail_on in joined:
            return 1, "", f"error running {joined}"
        return 0, "", ""


def _steps_with_deploy_flag(stack):
    calls = []
    steps = build_pipeline(stack, PipelineParams(registry_username="bob", registry_password="pw"))

    async def _fake_deploy():
        calls.append("deploy")
        return True

    steps[-1].action = _fake_deploy
    return steps, calls


def test_all_steps_succeed(sample_stack):
    steps, deploy_calls = _steps_with_deploy_flag(sample_stack)
    shell = FakeShell()
    result = asyncio.run(run_pipeline(steps, run_shell=shell))

    assert result.success
    assert result.failed_step is None
    assert [r.status for r in result.results] == [OK] * 7
    assert deploy_calls == ["deploy"]
    # checkout (2 commands) + login + 2 builds + 2 pushes
    assert len(shell.calls) == 7


def test_failed_build_publishes_nothing(sample_stack):
    steps, deploy_calls = _steps_with_deploy_flag(sample_stack)
    shell = FakeShell(fail_on="docker build -f ./backend")
    result = asyncio.run(run_pipeline(steps, run_shell=shell))

    assert not result.success
    assert result.failed_step == "build-backend"
    statuses = {r.name: r.status for r in result.results}
    assert statuses["build-backend"] == FAILED
    for name in ("build-frontend", "push-backend", "push-frontend", "remote-deploy"):
        assert statuses[name] == SKIPPED
    assert not any(cmd[:2] == ["docker", "push"] for cmd, _ in shell.calls)
    assert deploy_calls == []


def test_failed_push_skips_deploy(sample_stack):
    steps, deploy_calls = _steps_with_deploy_flag(sample_stack)
    shell = FakeShell(fail_on="docker push acme/frontend")
    result = asyncio.run(run_pipeline(steps, run_shell=shell))

    assert result.failed_step == "push-frontend"
    # Already pushed backend image is not rolled back
    assert (["docker", "push", "acme/backend:latest"], None) in shell.calls
    assert deploy_calls == []


def test_no_retry_on_failure():
    shell = FakeShell(fail_on="flaky")
    steps = [Step("one", [["flaky"]]), Step("two", [["ok"]])]
    result = asyncio.run(run_pipeline(steps, run_shell=shell))
    assert shell.calls == [(["flaky"], None)]
    assert [r.status for r in result.results] == [FAILED, SKIPPED]
    assert result.results[0].returncode == 1


def test_failing_action_fails_pipeline():
    async def _broken():
        return False

    result = asyncio.run(run_pipeline([Step("remote-deploy", action=_broken)], run_shell=FakeShell()))
    assert not result.success
    assert result.failed_step == "remote-deploy"


def test_stdin_passed_to_shell(sample_stack):
    steps, _ = _steps_with_deploy_flag(sample_stack)
    shell = FakeShell()
    asyncio.run(run_pipeline(steps, run_shell=shell))
    login_calls = [c for c in shell.calls if c[0][:2] == ["docker", "login"]]
    assert login_calls == [(["docker", "login", "-u", "bob", "--password-stdin"], "pw")]


def test_dry_run_end_to_end(sample_stack, caplog):
    caplog.set_level(logging.INFO)
    params = PipelineParams(registry_username="bob", registry_password="pw", server="deploy@10.0.0.5", dry_run=True)
    result = asyncio.run(run_pipeline(build_pipeline(sample_stack, params), dry_run=True))

    assert result.success
    text = caplog.text
    assert "[dry-run] git fetch origin main" in text
    assert "[dry-run] docker push acme/backend:latest" in text
    assert "docker compose pull backend frontend" in text
    assert "docker compose up -d --no-deps backend frontend" in text
    assert text.index("docker push acme/frontend:latest") < text.index("docker compose pull")
