"""Docker Compose generation."""

from stackdock.stack.types import ServiceConfig, Stack


def _quote(value):
    """YAML double-quoted scalar."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _list_block(key, items, indent="    "):
    if not items:
        return ""
    lines = "\n".join(f"{indent}  - {_quote(item)}" for item in items)
    return f"{indent}{key}:\n{lines}\n"


def _service_block(stack: Stack, svc: ServiceConfig, tag):
    block = f"""
  {svc.name}:
    image: {stack.image_for(svc, tag)}
    container_name: {svc.container_name}
    restart: {svc.restart}
"""
    if svc.depends_on:
        block += "    depends_on:\n" + "".join(f"      - {dep}\n" for dep in svc.depends_on)
    block += _list_block("ports", svc.ports)

    volumes = list(svc.volumes)
    if svc.name == stack.proxy and stack.routes:
        volumes.append("./nginx.conf:/etc/nginx/conf.d/default.conf:ro")
    block += _list_block("volumes", volumes)
    block += _list_block("environment", [k if v is None else f"{k}={v}" for k, v in svc.environment.items()])
    return block


def generate_compose(stack: Stack, tag="latest"):
    """Build docker-compose.yaml string from a resolved stack.

    Services keep declaration order. Built services reference the registry
    image with `tag`; the proxy additionally mounts the generated nginx.conf.
    """
    services = "services:\n"
    for svc in stack.services:
        services += _service_block(stack, svc, tag)

    if stack.volumes:
        services += "\nvolumes:\n" + "".join(f"  {name}:\n" for name in stack.volumes)

    return services
