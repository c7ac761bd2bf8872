"""Deploy parameters dataclass."""

from dataclasses import dataclass, field

from stackdock.stack.types import Stack


@dataclass
class DeployParams:
    """All parameters needed for a single remote apply."""

    server: str  # user@host or IP
    ssh_key: str  # path to SSH private key
    ssh_port: int = 22
    stack: Stack = field(default_factory=Stack)
    tag: str = "latest"
    targets: list[str] | None = None  # defaults to the stack's built services
    prune: bool = False
    dry_run: bool = False

    @property
    def host(self) -> str:
        return self.server.split("@")[-1] if "@" in self.server else self.server
