"""nginx reverse-proxy config generation."""

from stackdock.stack.types import Stack


def generate_nginx_conf(stack: Stack):
    """Generate a server block with one prefix location per route.

    Locations are emitted longest prefix first so the file reads in match
    precedence order. proxy_pass carries no URI part, so request paths are
    forwarded unchanged.
    """
    routes = sorted(stack.routes, key=lambda r: len(r.path), reverse=True)

    locations = "\n".join(
        f"""    location {route.path} {{
        proxy_pass http://{route.upstream};
        proxy_http_version 1.1;
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
    }}
"""
        for route in routes
    )

    return f"""server {{
    listen {stack.listen};
    server_name _;

{locations}}}
"""
