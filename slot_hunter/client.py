"""HTTP client construction for the reservation API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx

from slot_hunter.config import HunterConstants


def create_http_client(
    token: str, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """
    Create HTTP client carrying the bearer token and the site's headers.

    Args:
        token: Bearer token used for every request
        transport: Optional transport override (used by tests)

    Returns:
        Configured HTTP client
    """
    client = httpx.AsyncClient(
        transport=transport, timeout=HunterConstants.DEFAULT_TIMEOUT
    )
    client.headers.update(
        {
            "Authorization": f"Bearer {token}",
            "User-Agent": HunterConstants.USER_AGENT,
            "Accept-Language": HunterConstants.ACCEPT_LANGUAGE,
            "Accept": HunterConstants.ACCEPT,
            "Origin": HunterConstants.SITE_ORIGIN,
            "Referer": HunterConstants.SITE_ORIGIN + "/",
        }
    )
    return client


@asynccontextmanager
async def authenticated_client(
    token: str, transport: httpx.AsyncBaseTransport | None = None
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Context manager that always closes the client on exit."""
    client = create_http_client(token, transport=transport)
    try:
        yield client
    finally:
        if not client.is_closed:
            await client.aclose()
