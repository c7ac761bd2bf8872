"""Service dependency graph: cycle detection and startup ordering."""


def find_cycle(edges):
    """Return one dependency cycle as a list of names (first name repeated at the end), or None.

    Args:
        edges: dict mapping service name -> list of services it depends on.
            Targets missing from the dict are treated as leaves.
    """
    WHITE, GREY, BLACK = 0, 1, 2
    color = {name: WHITE for name in edges}
    stack = []

    def visit(name):
        color[name] = GREY
        stack.append(name)
        for dep in edges.get(name, []):
            state = color.get(dep, BLACK)
            if state == GREY:
                return stack[stack.index(dep):] + [dep]
            if state == WHITE:
                found = visit(dep)
                if found:
                    return found
        stack.pop()
        color[name] = BLACK
        return None

    for name in edges:
        if color[name] == WHITE:
            found = visit(name)
            if found:
                return found
    return None


def startup_order(edges):
    """Order services so every service comes after its dependencies.

    Ties are broken by declaration order, so an already-ordered manifest
    comes back unchanged. Raises ValueError on a cycle.
    """
    cycle = find_cycle(edges)
    if cycle:
        raise ValueError(f"Dependency cycle: {' -> '.join(cycle)}")

    ordered = []
    placed = set()
    remaining = list(edges)
    while remaining:
        for name in remaining:
            if all(dep in placed or dep not in edges for dep in edges[name]):
                ordered.append(name)
                placed.add(name)
                remaining.remove(name)
                break
    return ordered


def dependents(edges, name):
    """Transitive set of services that depend on `name`."""
    result = set()
    frontier = [name]
    while frontier:
        current = frontier.pop()
        for svc, deps in edges.items():
            if current in deps and svc not in result:
                result.add(svc)
                frontier.append(svc)
    return result
