"""Shared HTTP plumbing for the data fetchers."""

import logging
from contextlib import asynccontextmanager
from typing import (
    Any,
    AsyncIterator,
    Mapping,
)

import httpx

from finchat.config import settings
from finchat.core.schema import (
    Unavailable,
    UnavailableReason,
)

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64; rv:120.0) Gecko/20100101 Firefox/120.0",
    "Accept-Language": "en-IN,en;q=0.9",
}


@asynccontextmanager
async def client_scope(client: httpx.AsyncClient | None = None) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *client* if given, otherwise a short-lived client owned by this scope."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT, headers=DEFAULT_HEADERS, follow_redirects=True
    ) as owned:
        yield owned


async def get_json(
    client: httpx.AsyncClient, url: str, params: Mapping[str, Any] | None = None
) -> Any:
    """GET *url* and decode the JSON body.  Raises ``httpx.HTTPError`` or ``ValueError``."""
    resp = await client.get(url, params=params)
    resp.raise_for_status()
    return resp.json()


def unavailable_from(tool: str, exc: Exception) -> Unavailable:
    """Convert a transport or decoding exception into the "no data" sentinel."""
    if isinstance(exc, httpx.TimeoutException):
        reason = UnavailableReason.TIMEOUT
    elif isinstance(exc, httpx.HTTPError):
        reason = UnavailableReason.HTTP_ERROR
    else:
        reason = UnavailableReason.PARSE_ERROR
    logger.warning("%s fetch failed (%s): %s", tool, reason.value, exc)
    return Unavailable(tool=tool, reason=reason, detail=str(exc))
