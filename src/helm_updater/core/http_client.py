"""HTTP client construction for repository fetches."""

from __future__ import annotations

import httpx

from helm_updater.config.settings import Settings


def build_client(
    cfg: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the async client shared by all fetches of one resolution call.

    Credentials are not attached here; each request is decorated
    individually by ``helm_updater.core.auth``.
    """
    return httpx.AsyncClient(
        # Prevent indefinite hangs on unreachable repositories
        timeout=httpx.Timeout(cfg.http_timeout),
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=True,
        max_redirects=cfg.max_redirects,
        limits=httpx.Limits(max_connections=max(cfg.max_concurrency, 1) * 2),
        transport=transport,
    )
