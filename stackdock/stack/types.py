"""Stack dataclass types."""

from dataclasses import dataclass, field

# Per-kind build defaults: base image, listening port, entry file / asset dir.
BUILD_DEFAULTS = {
    "node": {"base_image": "node:18-alpine", "port": 5000, "entrypoint": "server.js", "dist": ""},
    "static": {"base_image": "nginx:alpine", "port": 80, "entrypoint": "", "dist": "dist"},
}


@dataclass
class BuildConfig:
    """How to build an application image from source in this repository."""

    kind: str = "node"
    context: str = "."
    dockerfile: str = "Dockerfile"
    base_image: str = ""
    port: int = 0
    entrypoint: str = ""
    dist: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "BuildConfig":
        kind = d.get("kind", "node")
        defaults = BUILD_DEFAULTS.get(kind, {})
        return cls(
            kind=kind,
            context=d.get("context", "."),
            dockerfile=d.get("dockerfile", "Dockerfile"),
            base_image=d.get("base_image", defaults.get("base_image", "")),
            port=d.get("port", defaults.get("port", 0)),
            entrypoint=d.get("entrypoint", defaults.get("entrypoint", "")),
            dist=d.get("dist", defaults.get("dist", "")),
        )

    @property
    def dockerfile_path(self) -> str:
        """Dockerfile path relative to the repository root."""
        return f"{self.context.rstrip('/')}/{self.dockerfile}"


def _env_entry(service, item):
    """Split a list-form environment entry; a bare `KEY` is passed through."""
    if not isinstance(item, str) or not item:
        raise ValueError(f"service '{service}' has invalid environment entry {item!r}")
    key, sep, value = item.partition("=")
    if not key:
        raise ValueError(f"service '{service}' has invalid environment entry {item!r}")
    return key, value if sep else None


@dataclass
class ServiceConfig:
    """One service of the composition manifest."""

    name: str
    image: str = ""
    container_name: str = ""
    depends_on: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)
    # None means pass the variable through from the host environment
    environment: dict[str, str | None] = field(default_factory=dict)
    restart: str = "unless-stopped"
    build: BuildConfig | None = None

    @classmethod
    def from_dict(cls, name: str, d: dict) -> "ServiceConfig":
        build_dict = d.get("build")
        environment = d.get("environment") or {}
        if isinstance(environment, list):
            environment = dict(_env_entry(name, item) for item in environment)
        return cls(
            name=name,
            image=d.get("image", ""),
            container_name=d.get("container_name") or name,
            depends_on=list(d.get("depends_on") or []),
            ports=[str(p) for p in d.get("ports") or []],
            volumes=list(d.get("volumes") or []),
            environment={k: None if v is None else str(v) for k, v in environment.items()},
            restart=d.get("restart", "unless-stopped"),
            build=BuildConfig.from_dict(build_dict) if build_dict is not None else None,
        )

    @property
    def is_built(self) -> bool:
        """True when the image is built and pushed by the pipeline."""
        return self.build is not None

    @property
    def named_volumes(self) -> list[str]:
        """Named volumes (not bind mounts) referenced by this service's mounts."""
        names = []
        for mount in self.volumes:
            source = mount.split(":", 1)[0]
            if source and not source.startswith((".", "/", "~", "$")):
                names.append(source)
        return names


@dataclass
class RouteConfig:
    """Path-prefix route on the reverse proxy."""

    path: str
    service: str
    port: int = 80

    @property
    def upstream(self) -> str:
        return f"{self.service}:{self.port}"


@dataclass
class RegistryConfig:
    """Image registry settings. Empty url means Docker Hub."""

    url: str = ""
    namespace: str = ""

    def image_ref(self, name: str, tag: str = "latest") -> str:
        """Fully qualified image reference for an application service."""
        parts = [p for p in (self.url.rstrip("/"), self.namespace, name) if p]
        return f"{'/'.join(parts)}:{tag}"


# Secret names the rendered workflow and the local pipeline read from the environment.
DEFAULT_SECRETS = {
    "registry_username": "DOCKER_USERNAME",
    "registry_password": "DOCKER_PASSWORD",
    "host": "SERVER_HOST",
    "username": "SERVER_USER",
    "ssh_key": "SERVER_SSH_KEY",
}


@dataclass
class PipelineConfig:
    """CI trigger and secret names."""

    branch: str = "main"
    secrets: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SECRETS))


@dataclass
class DeployConfig:
    """Where and how the stack lives on the target host."""

    remote_dir: str = "~/app"
    repository: str = ""
    prune: bool = False


@dataclass
class Stack:
    """Complete deployment topology."""

    name: str = "app"
    services: list[ServiceConfig] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)
    routes: list[RouteConfig] = field(default_factory=list)
    proxy: str = "proxy"
    listen: int = 80
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    deploy: DeployConfig = field(default_factory=DeployConfig)

    @classmethod
    def from_dict(cls, d: dict) -> "Stack":
        """Build a Stack from a (post-merge) config dict."""
        services = [ServiceConfig.from_dict(name, svc or {}) for name, svc in (d.get("services") or {}).items()]

        routes = []
        for i, r in enumerate(d.get("routes") or [], 1):
            for key in ("path", "service"):
                if not isinstance(r, dict) or not r.get(key):
                    raise ValueError(f"route #{i} is missing '{key}'")
            routes.append(RouteConfig(path=r["path"], service=r["service"], port=int(r.get("port", 80))))

        volumes = d.get("volumes") or []
        if isinstance(volumes, dict):
            volumes = list(volumes.keys())

        registry_dict = d.get("registry") or {}
        pipeline_dict = d.get("pipeline") or {}
        deploy_dict = d.get("deploy") or {}

        return cls(
            name=d.get("name", "app"),
            services=services,
            volumes=list(volumes),
            routes=routes,
            proxy=d.get("proxy", "proxy"),
            listen=int(d.get("listen", 80)),
            registry=RegistryConfig(
                url=registry_dict.get("url", ""),
                namespace=registry_dict.get("namespace", ""),
            ),
            pipeline=PipelineConfig(
                branch=pipeline_dict.get("branch", "main"),
                secrets={**DEFAULT_SECRETS, **(pipeline_dict.get("secrets") or {})},
            ),
            deploy=DeployConfig(
                remote_dir=deploy_dict.get("remote_dir", "~/app"),
                repository=deploy_dict.get("repository", ""),
                prune=bool(deploy_dict.get("prune", False)),
            ),
        )

    def service(self, name: str) -> ServiceConfig:
        for svc in self.services:
            if svc.name == name:
                return svc
        raise KeyError(f"Unknown service '{name}'")

    @property
    def service_names(self) -> list[str]:
        return [svc.name for svc in self.services]

    @property
    def app_services(self) -> list[ServiceConfig]:
        """Services whose images the pipeline builds and pushes, in declaration order."""
        return [svc for svc in self.services if svc.is_built]

    @property
    def dependency_edges(self) -> dict[str, list[str]]:
        """service -> declared depends_on targets."""
        return {svc.name: list(svc.depends_on) for svc in self.services}

    def image_for(self, svc: ServiceConfig, tag: str = "latest") -> str:
        """Image reference the compose file uses for a service."""
        if svc.image:
            return svc.image
        return self.registry.image_ref(svc.name, tag)
