"""CI pipeline (GitHub Actions workflow) generation."""

import yaml

from stackdock.stack.types import Stack

WORKFLOW_PATH = ".github/workflows/deploy.yml"


def _secret(name):
    return "${{ secrets.%s }}" % name


def remote_deploy_script(stack: Stack, targets=None):
    """Shell lines run on the target host: pull, then recreate only the app services."""
    targets = targets or [svc.name for svc in stack.app_services]
    names = " ".join(targets)
    lines = [
        f"cd {stack.deploy.remote_dir}",
        f"docker compose pull {names}",
        f"docker compose up -d --no-deps {names}",
    ]
    if stack.deploy.prune:
        lines.append("docker image prune -f")
    return lines


def generate_workflow(stack: Stack, tag="latest"):
    """Render the deploy workflow: push trigger, serialized runs, seven linear steps."""
    secrets = stack.pipeline.secrets
    branch = stack.pipeline.branch

    login = {
        "username": _secret(secrets["registry_username"]),
        "password": _secret(secrets["registry_password"]),
    }
    if stack.registry.url:
        login = {"registry": stack.registry.url, **login}

    steps = [
        {"name": "Checkout", "uses": "actions/checkout@v4"},
        {"name": "Log in to registry", "uses": "docker/login-action@v3", "with": login},
    ]
    for svc in stack.app_services:
        ref = stack.registry.image_ref(svc.name, tag)
        steps.append({
            "name": f"Build {svc.name} image",
            "run": f"docker build -f {svc.build.dockerfile_path} -t {ref} {svc.build.context}",
        })
    for svc in stack.app_services:
        steps.append({
            "name": f"Push {svc.name} image",
            "run": f"docker push {stack.registry.image_ref(svc.name, tag)}",
        })
    steps.append({
        "name": "Deploy to server",
        "uses": "appleboy/ssh-action@v1",
        "with": {
            "host": _secret(secrets["host"]),
            "username": _secret(secrets["username"]),
            "key": _secret(secrets["ssh_key"]),
            "script": "\n".join(remote_deploy_script(stack)) + "\n",
        },
    })

    workflow = {
        "name": f"Deploy {stack.name}",
        "on": {"push": {"branches": [branch]}},
        # One deploy at a time per branch; a newer push waits instead of racing.
        "concurrency": {"group": f"deploy-{branch}", "cancel-in-progress": False},
        "jobs": {
            "deploy": {
                "runs-on": "ubuntu-latest",
                "steps": steps,
            }
        },
    }
    return yaml.safe_dump(workflow, sort_keys=False, default_flow_style=False, width=1000)
