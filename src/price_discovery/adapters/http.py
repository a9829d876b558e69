"""Shared HTTP helper for feed adapters."""

from __future__ import annotations

import asyncio
from typing import Any

import backoff
import requests

from ..logger import get_logger

logger = get_logger(__name__)


def _is_permanent(exc: Exception) -> bool:
    """Client errors other than rate limiting will not succeed on retry."""
    response = getattr(exc, "response", None)
    if response is None:
        return False
    return 400 <= response.status_code < 500 and response.status_code != 429


async def get_json(
    url: str,
    *,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 10.0,
    retries: int = 3,
) -> Any:
    """GET ``url`` and decode its JSON body, retrying transient failures.

    Args:
        url: Absolute URL to fetch
        params: Optional query parameters
        headers: Optional request headers
        timeout: Per-request timeout in seconds
        retries: Retries after the first attempt

    Returns:
        The decoded JSON payload

    Raises:
        requests.RequestException: When every attempt failed
    """

    def _on_backoff(details: Any) -> None:
        logger.warning(
            "GET %s failed (attempt %d of %d): %s",
            url,
            details["tries"],
            retries + 1,
            details.get("exception"),
        )

    @backoff.on_exception(
        backoff.expo,
        requests.RequestException,
        max_tries=retries + 1,
        giveup=_is_permanent,
        on_backoff=_on_backoff,
        factor=0.5,
        max_value=5,
    )
    async def _get() -> Any:
        response = await asyncio.to_thread(
            requests.get, url, params=params, headers=headers, timeout=timeout
        )
        response.raise_for_status()
        return response.json()

    return await _get()
