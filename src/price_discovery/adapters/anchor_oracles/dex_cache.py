from __future__ import annotations

import time
from typing import Any

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...constants import DEX_CACHE_BTC_PRICE_PATH
from ...domain import AnchorQuote
from ...logger import get_logger
from ...settings import PricingSettings
from ..http import get_json
from .base import AnchorOracleError, BaseAnchorOracle

logger = get_logger(__name__)


class BtcPriceResponse(BaseModel):
    price: float = Field(gt=0)
    confidence: float = Field(default=1.0, ge=0, le=1)
    timestamp: float | None = None  # unix milliseconds
    source: str | None = None

    model_config = ConfigDict(extra="ignore")


class DexCacheAnchorOracle(BaseAnchorOracle):
    """BTC/USD price published by the DEX cache's own oracle endpoint."""

    def __init__(self, config: PricingSettings):
        super().__init__(config)
        self.url = config.dex_cache_url.rstrip("/") + DEX_CACHE_BTC_PRICE_PATH

    @property
    def oracle_name(self) -> str:
        return "dex-cache"

    async def fetch_quote(self) -> AnchorQuote:
        try:
            payload: Any = await get_json(
                self.url,
                timeout=self.config.http_timeout,
                retries=self.config.http_retries,
            )
        except requests.RequestException as exc:
            raise AnchorOracleError(f"BTC price unavailable at {self.url}: {exc}") from exc

        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        try:
            body = BtcPriceResponse.model_validate(payload)
        except ValidationError as exc:
            raise AnchorOracleError(f"Malformed BTC price response: {exc}") from exc

        quote = AnchorQuote(
            price=body.price,
            source=body.source or self.oracle_name,
            confidence=body.confidence,
            timestamp=body.timestamp / 1000 if body.timestamp else time.time(),
        )
        logger.info(
            "Anchor price from %s: $%.2f (confidence %.2f)",
            quote.source,
            quote.price,
            quote.confidence,
        )
        return self.validate_quote(quote)
