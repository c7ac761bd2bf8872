"""Structural checks across services, volumes and routes."""

from collections import Counter

from stackdock.stack.graph import find_cycle
from stackdock.stack.types import BUILD_DEFAULTS, Stack


def stack_errors(stack: Stack) -> list[str]:
    """Collect every structural problem in the stack. Empty list means valid."""
    errors = []
    names = set(stack.service_names)

    for name, count in Counter(stack.service_names).items():
        if count > 1:
            errors.append(f"service '{name}' is declared {count} times")

    # depends_on targets
    for svc in stack.services:
        for dep in svc.depends_on:
            if dep not in names:
                errors.append(f"service '{svc.name}' depends on undeclared service '{dep}'")
            elif dep == svc.name:
                errors.append(f"service '{svc.name}' depends on itself")

    cycle = find_cycle(stack.dependency_edges)
    if cycle and len(cycle) > 2:
        errors.append(f"dependency cycle: {' -> '.join(cycle)}")

    # Routes
    for prefix, count in Counter(r.path for r in stack.routes).items():
        if count > 1:
            errors.append(f"route prefix '{prefix}' is declared {count} times")
    for route in stack.routes:
        if not route.path.startswith("/"):
            errors.append(f"route prefix '{route.path}' must start with '/'")
        if route.service not in names:
            errors.append(f"route '{route.path}' points at undeclared service '{route.service}'")
            continue
        svc = stack.service(route.service)
        if svc.build is not None and svc.build.port != route.port:
            errors.append(
                f"route '{route.path}' targets {route.upstream} but '{svc.name}' listens on {svc.build.port}"
            )

    if stack.routes and stack.proxy not in names:
        errors.append(f"proxy service '{stack.proxy}' is not declared")

    # Volumes: declared, and single writer per named volume
    declared = set(stack.volumes)
    mounted_by = {}
    for svc in stack.services:
        for volume in svc.named_volumes:
            if volume not in declared:
                errors.append(f"service '{svc.name}' mounts undeclared volume '{volume}'")
            mounted_by.setdefault(volume, []).append(svc.name)
    for volume, users in mounted_by.items():
        if len(users) > 1:
            errors.append(f"volume '{volume}' is mounted by more than one service: {', '.join(users)}")

    for container, count in Counter(svc.container_name for svc in stack.services).items():
        if count > 1:
            errors.append(f"container name '{container}' is used by {count} services")

    for svc in stack.services:
        if not svc.image and not svc.is_built:
            errors.append(f"service '{svc.name}' has neither an image nor a build section")
        if svc.build is not None and svc.build.kind not in BUILD_DEFAULTS:
            errors.append(f"service '{svc.name}' has unknown build kind '{svc.build.kind}'")

    if stack.app_services and not (stack.registry.url or stack.registry.namespace):
        errors.append("registry needs a url or a namespace to publish built images")

    return errors


def validate_stack(stack: Stack):
    """Raise ValueError listing all structural problems, if any."""
    errors = stack_errors(stack)
    if errors:
        raise ValueError("Invalid stack:\n  - " + "\n  - ".join(errors))
