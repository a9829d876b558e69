from __future__ import annotations

import time

import requests

from ...constants import COINGECKO_BTC_ID
from ...domain import AnchorQuote
from ...logger import get_logger
from ...settings import PricingSettings
from ..http import get_json
from .base import AnchorOracleError, BaseAnchorOracle

logger = get_logger(__name__)


class CoinGeckoAnchorOracle(BaseAnchorOracle):
    """BTC/USD from CoinGecko's simple price endpoint."""

    def __init__(self, config: PricingSettings):
        super().__init__(config)
        self.url = config.coingecko_url.rstrip("/") + "/simple/price"

    @property
    def oracle_name(self) -> str:
        return "coingecko"

    def _headers(self) -> dict[str, str]:
        if self.config.coingecko_api_key is None:
            return {}
        return {"x-cg-demo-api-key": self.config.coingecko_api_key.get_secret_value()}

    async def fetch_quote(self) -> AnchorQuote:
        try:
            payload = await get_json(
                self.url,
                params={
                    "ids": COINGECKO_BTC_ID,
                    "vs_currencies": "usd",
                    "include_last_updated_at": "true",
                },
                headers=self._headers(),
                timeout=self.config.http_timeout,
                retries=self.config.http_retries,
            )
        except requests.RequestException as exc:
            raise AnchorOracleError(f"CoinGecko unavailable: {exc}") from exc

        entry = payload.get(COINGECKO_BTC_ID) if isinstance(payload, dict) else None
        if not isinstance(entry, dict) or "usd" not in entry:
            raise AnchorOracleError(f"CoinGecko response has no {COINGECKO_BTC_ID}/usd price")

        try:
            price = float(entry["usd"])
        except (TypeError, ValueError) as exc:
            raise AnchorOracleError(f"CoinGecko price is not numeric: {entry['usd']!r}") from exc

        quote = AnchorQuote(
            price=price,
            source=self.oracle_name,
            confidence=1.0,
            timestamp=float(entry.get("last_updated_at") or time.time()),
        )
        logger.info("Anchor price from coingecko: $%.2f", quote.price)
        return self.validate_quote(quote)
