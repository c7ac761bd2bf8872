"""Shared pytest fixtures for all test modules."""

import copy
import os
import subprocess
import sys

import pytest
import yaml

from stackdock.stack import Stack

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))
STACKS_DIR = os.path.join(PROJECT_ROOT, "stacks")


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def stacks_dir():
    """Absolute path to the stacks/ directory."""
    return STACKS_DIR


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the stackdock CLI as a subprocess."""

    def _run(*args, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "stackdock.stackdock", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env={**os.environ, **(env or {})},
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Unit-test fixtures ──────────────────────────────────────────────

SAMPLE_STACK = {
    "name": "tutorial",
    "registry": {"namespace": "acme"},
    "services": {
        "database": {
            "image": "mongo:6.0",
            "volumes": ["db-data:/data/db"],
        },
        "backend": {
            "build": {"kind": "node", "context": "./backend", "port": 5000},
            "depends_on": ["database"],
            "environment": {"DB_HOST": "database"},
        },
        "frontend": {
            "build": {"kind": "static", "context": "./frontend", "dist": "dist/app"},
            "depends_on": ["backend"],
        },
        "proxy": {
            "image": "nginx:alpine",
            "ports": ["80:80"],
            "depends_on": ["frontend"],
        },
    },
    "volumes": ["db-data"],
    "proxy": "proxy",
    "routes": [
        {"path": "/", "service": "frontend", "port": 80},
        {"path": "/api", "service": "backend", "port": 5000},
    ],
    "pipeline": {"branch": "main"},
    "deploy": {"remote_dir": "~/tutorial"},
    "environments": {
        "staging": {
            "pipeline": {"branch": "develop"},
            "deploy": {"remote_dir": "~/tutorial-staging", "prune": True},
        },
    },
}


@pytest.fixture
def sample_stack_dict():
    """Return a fresh copy of the four-tier stack config dict."""
    d = copy.deepcopy(SAMPLE_STACK)
    d.pop("environments")
    return d


@pytest.fixture
def sample_stack(sample_stack_dict):
    """Return the four-tier stack as a Stack dataclass."""
    return Stack.from_dict(sample_stack_dict)


@pytest.fixture
def tmp_stack_dir(tmp_path):
    """Create a temp directory with a sample stack.yaml (including environments)."""
    with open(tmp_path / "stack.yaml", "w") as f:
        yaml.dump(SAMPLE_STACK, f)
    return str(tmp_path)


class FakeRunCmd:
    """Stand-in for a transport run_cmd that records every command.

    `responses` maps a command substring to (rc, stdout, stderr); the first
    matching entry wins, everything else succeeds with empty output.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.commands = []

    async def __call__(self, command, stream=True, timeout=600, log_output=False):
        self.commands.append(command)
        for fragment, response in self.responses.items():
            if fragment in command:
                return response
        return 0, "", ""

    def ran(self, fragment):
        return [c for c in self.commands if fragment in c]


class FakeWriteFile:
    def __init__(self, ok=True):
        self.files = {}
        self.ok = ok

    async def __call__(self, path, content):
        self.files[path] = content
        return self.ok


@pytest.fixture
def fake_run_cmd():
    """Factory for FakeRunCmd instances."""
    return FakeRunCmd


@pytest.fixture
def fake_write_file():
    return FakeWriteFile()


@pytest.fixture
def failing_write_file():
    """write_file that reports every upload as failed."""
    return FakeWriteFile(ok=False)
