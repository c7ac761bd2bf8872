"""Artifact rendering: Dockerfiles, compose manifest, nginx config, CI workflow."""

import os

from stackdock.render.compose import generate_compose
from stackdock.render.dockerfile import generate_dockerfile
from stackdock.render.nginx import generate_nginx_conf
from stackdock.render.workflow import WORKFLOW_PATH, generate_workflow, remote_deploy_script

COMPOSE_FILE = "docker-compose.yaml"
NGINX_FILE = "nginx.conf"


def render_all(stack, tag="latest"):
    """Return {relative path: content} for every generated artifact."""
    files = {}
    for svc in stack.app_services:
        files[os.path.normpath(svc.build.dockerfile_path)] = generate_dockerfile(svc.build)
    files[COMPOSE_FILE] = generate_compose(stack, tag)
    if stack.routes:
        files[NGINX_FILE] = generate_nginx_conf(stack)
    files[WORKFLOW_PATH] = generate_workflow(stack, tag)
    return files


__all__ = [
    "COMPOSE_FILE",
    "NGINX_FILE",
    "WORKFLOW_PATH",
    "generate_compose",
    "generate_dockerfile",
    "generate_nginx_conf",
    "generate_workflow",
    "remote_deploy_script",
    "render_all",
]
