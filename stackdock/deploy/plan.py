"""Decide which containers an apply has to start or recreate."""

from dataclasses import dataclass, field

from stackdock.stack.graph import startup_order
from stackdock.stack.types import Stack


@dataclass
class ServiceState:
    """Observed state of one service on the target host.

    container_image is the image ID the running container was created from
    ("" when unknown); latest_image is the ID of the image the compose file
    currently references after pull ("" when unknown).
    """

    service: str
    container_image: str = ""
    latest_image: str = ""
    running: bool = True

    @property
    def outdated(self) -> bool:
        # Unknown IDs cannot prove the container is current.
        if not self.container_image or not self.latest_image:
            return True
        return self.container_image != self.latest_image


@dataclass
class RecreatePlan:
    """Services to start (no container), recreate (image changed) and keep untouched."""

    start: list[str] = field(default_factory=list)
    recreate: list[str] = field(default_factory=list)
    keep: list[str] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.start and not self.recreate


def plan_recreate(stack: Stack, states: dict[str, ServiceState], targets=None) -> RecreatePlan:
    """Build the apply plan.

    Only `targets` (default: the stack's built services) are ever recreated,
    and an outdated target is recreated even when its container is stopped,
    so the pulled image goes live. Services with no container, and stopped
    containers that need no new image, are started. Everything else,
    including the database and the proxy, is kept as is. Lists follow
    startup order.
    """
    if targets is None:
        targets = [svc.name for svc in stack.app_services]
    targets = set(targets)

    plan = RecreatePlan()
    for name in startup_order(stack.dependency_edges):
        state = states.get(name)
        if state is None:
            plan.start.append(name)
        elif name in targets and state.outdated:
            plan.recreate.append(name)
        elif not state.running:
            plan.start.append(name)
        else:
            plan.keep.append(name)
    return plan
