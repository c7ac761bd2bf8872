"""Post-deploy route check through the reverse proxy."""

import logging

import httpx

from stackdock.stack.types import Stack

logger = logging.getLogger(__name__)


async def check_routes(stack: Stack, host, port=None, transport=None, timeout=10):
    """GET every route prefix through the proxy.

    A route passes when the proxy answers with a status below 500: a 404
    from the application still proves nginx reached the upstream, while a
    502/504 means the upstream container is down or still starting.

    Returns:
        (ok, results) where results maps path -> status code or error text.
    """
    port = port or stack.listen
    base_url = f"http://{host}:{port}"
    results = {}
    ok = True
    async with httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout) as client:
        for route in stack.routes:
            try:
                resp = await client.get(route.path)
                results[route.path] = resp.status_code
                passed = resp.status_code < 500
            except httpx.HTTPError as e:
                results[route.path] = f"{type(e).__name__}: {e}"
                passed = False
            level = logging.INFO if passed else logging.ERROR
            logger.log(level, f"  {route.path} -> {route.upstream}: {results[route.path]}")
            ok = ok and passed
    return ok, results
