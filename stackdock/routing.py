"""Path routing with nginx prefix-location semantics."""

from stackdock.stack.types import RouteConfig, Stack


def resolve_route(routes: list[RouteConfig], path: str) -> RouteConfig | None:
    """Return the route whose prefix is the longest literal prefix of `path`.

    Mirrors nginx `location <prefix>` matching: plain string prefixes, so
    `/api` matches `/api/tutorials` and also `/apis`. The query string is
    ignored.
    """
    path = path.split("?", 1)[0] or "/"
    best = None
    for route in routes:
        if path.startswith(route.path) and (best is None or len(route.path) > len(best.path)):
            best = route
    return best


def resolve_upstream(stack: Stack, path: str) -> str:
    """Return 'service:port' for `path`, or raise LookupError."""
    route = resolve_route(stack.routes, path)
    if route is None:
        raise LookupError(f"No route matches {path}")
    return route.upstream
