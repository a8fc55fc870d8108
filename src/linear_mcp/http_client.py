"""Shared httpx.AsyncClient for outbound Linear requests.

One pooled client per process. Created lazily on first use and closed when
the stdio server shuts down.
"""

import logging
from typing import Optional

import httpx

from .config import get_settings

logger = logging.getLogger(__name__)

_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Return the shared client, creating it on first call.

    No timeout is applied unless ``HTTP_TIMEOUT`` is configured.
    """
    global _client
    if _client is None or _client.is_closed:
        settings = get_settings()
        _client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout))
        logger.debug("Created shared HTTP client (timeout=%s)", settings.http_timeout)
    return _client


async def close_http_client() -> None:
    """Close the shared client if one was created."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.debug("Closed shared HTTP client")
    _client = None
