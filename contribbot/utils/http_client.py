"""Persistent httpx clients for the Discord and GitHub APIs.

Clients are created once per application and reused for every call so
connections are pooled. The owner closes them on shutdown.
"""

import httpx

from contribbot.constants import HTTPX_TIMEOUT

# Connection pool limits
_POOL_LIMITS = httpx.Limits(
    max_connections=20,
    max_keepalive_connections=10,
    keepalive_expiry=30,
)


def create_http_client(
    base_url: str,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create a pooled async client bound to an API base URL.

    Args:
        base_url: Root URL that relative request paths resolve against
        headers: Default headers sent with every request
        transport: Optional transport override (used by tests)

    Returns:
        Configured httpx.AsyncClient
    """
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=HTTPX_TIMEOUT,
        limits=_POOL_LIMITS,
        transport=transport,
    )
