"""Pipeline step definitions: checkout, login, builds, pushes, remote deploy."""

from dataclasses import dataclass, field
from typing import Awaitable, Callable

from stackdock.deploy.orchestrate import deploy
from stackdock.deploy.params import DeployParams
from stackdock.provisioning.shell import run_shell_cmd
from stackdock.stack.types import Stack


@dataclass
class Step:
    """One unit of pipeline work.

    Either a list of argv commands run in order, or an async action
    returning True on success.
    """

    name: str
    commands: list[list[str]] = field(default_factory=list)
    stdin: str | None = None
    action: Callable[[], Awaitable[bool]] | None = None

    def describe(self) -> str:
        if self.action is not None:
            return "(remote action)"
        return " && ".join(" ".join(cmd) for cmd in self.commands)


@dataclass
class PipelineParams:
    """Secrets and target for a local pipeline run."""

    registry_username: str = ""
    registry_password: str = ""
    server: str = ""  # user@host
    ssh_key: str = ""
    ssh_port: int = 22
    tag: str = "latest"
    dry_run: bool = False


async def uncommitted_changes(workdir, run_shell=run_shell_cmd):
    """Modified tracked files in `workdir` that the forced checkout would discard.

    Untracked files survive the checkout and are not reported. A directory
    that is not a git checkout reports nothing; the checkout step fails there.
    """
    rc, out, _ = await run_shell(["git", "status", "--porcelain", "--untracked-files=no"], cwd=workdir)
    if rc != 0:
        return []
    return [line for line in out.splitlines() if line.strip()]


def build_pipeline(stack: Stack, params: PipelineParams) -> list[Step]:
    """Return the ordered steps for one push-triggered run.

    checkout -> authenticate -> build-* -> push-* -> remote-deploy, with one
    build and one push per built service in declaration order.
    """
    branch = stack.pipeline.branch
    steps = [
        Step("checkout", [
            ["git", "fetch", "origin", branch],
            ["git", "checkout", "--force", "FETCH_HEAD"],
        ]),
    ]

    login = ["docker", "login", "-u", params.registry_username, "--password-stdin"]
    if stack.registry.url:
        login.append(stack.registry.url)
    steps.append(Step("authenticate", [login], stdin=params.registry_password))

    for svc in stack.app_services:
        ref = stack.registry.image_ref(svc.name, params.tag)
        steps.append(Step(
            f"build-{svc.name}",
            [["docker", "build", "-f", svc.build.dockerfile_path, "-t", ref, svc.build.context]],
        ))
    for svc in stack.app_services:
        steps.append(Step(f"push-{svc.name}", [["docker", "push", stack.registry.image_ref(svc.name, params.tag)]]))

    deploy_params = DeployParams(
        server=params.server,
        ssh_key=params.ssh_key,
        ssh_port=params.ssh_port,
        stack=stack,
        tag=params.tag,
        prune=stack.deploy.prune,
        dry_run=params.dry_run,
    )

    async def _remote_deploy():
        return await deploy(deploy_params)

    steps.append(Step("remote-deploy", action=_remote_deploy))
    return steps
