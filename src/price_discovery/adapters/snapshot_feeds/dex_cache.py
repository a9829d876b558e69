from __future__ import annotations

import time
from typing import Any

import requests

from ...constants import DEX_CACHE_VAULTS_PATH
from ...domain import PoolSnapshot
from ...logger import get_logger
from ...settings import PricingSettings
from ..http import get_json
from .base import BaseSnapshotFeed, SnapshotFeedError, build_snapshot

logger = get_logger(__name__)


def _extract_vaults(payload: Any) -> list[dict[str, Any]]:
    """Accept either a bare list or a ``{"data": [...]}`` envelope."""
    if isinstance(payload, dict):
        payload = payload.get("data", payload.get("vaults"))
    if not isinstance(payload, list):
        raise SnapshotFeedError("Unexpected vaults payload: expected a list of vaults")
    return [item for item in payload if isinstance(item, dict)]


class DexCacheSnapshotFeed(BaseSnapshotFeed):
    """Reads pool vaults from the DEX cache HTTP API."""

    def __init__(self, config: PricingSettings):
        super().__init__(config)
        self.url = config.dex_cache_url.rstrip("/") + DEX_CACHE_VAULTS_PATH

    @property
    def feed_name(self) -> str:
        return "dex-cache"

    async def fetch_snapshot(self) -> PoolSnapshot:
        logger.info("Fetching vaults from %s", self.url)
        try:
            payload = await get_json(
                self.url,
                params={"type": "POOL"},
                timeout=self.config.http_timeout,
                retries=self.config.http_retries,
            )
        except requests.RequestException as exc:
            raise SnapshotFeedError(f"DEX cache unavailable at {self.url}: {exc}") from exc

        vaults = _extract_vaults(payload)
        logger.debug("DEX cache returned %d vault records", len(vaults))
        return build_snapshot(vaults, self.config, as_of=time.time())
