"""Dockerfile generation for application services."""

from stackdock.stack.types import BuildConfig


def _node_dockerfile(build: BuildConfig):
    # Manifest first so the dependency layer is cached across source changes.
    return f"""FROM {build.base_image}

WORKDIR /app

COPY package*.json ./
RUN npm install --omit=dev

COPY . .

EXPOSE {build.port}

CMD ["node", "{build.entrypoint}"]
"""


def _static_dockerfile(build: BuildConfig):
    dist = build.dist.rstrip("/")
    return f"""FROM {build.base_image}

COPY {dist}/ /usr/share/nginx/html/

EXPOSE {build.port}
"""


DOCKERFILE_BUILDERS = {
    "node": _node_dockerfile,
    "static": _static_dockerfile,
}


def generate_dockerfile(build: BuildConfig):
    """Render the Dockerfile for a build section. Raises ValueError on unknown kind."""
    builder = DOCKERFILE_BUILDERS.get(build.kind)
    if builder is None:
        available = ", ".join(sorted(DOCKERFILE_BUILDERS))
        raise ValueError(f"Unknown build kind '{build.kind}'. Available kinds: {available}")
    return builder(build)
