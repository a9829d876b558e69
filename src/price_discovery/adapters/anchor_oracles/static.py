from __future__ import annotations

import time

from ...domain import AnchorQuote
from .base import BaseAnchorOracle


class StaticAnchorOracle(BaseAnchorOracle):
    """Fixed anchor price from settings, for offline runs and replays."""

    @property
    def oracle_name(self) -> str:
        return "static"

    async def fetch_quote(self) -> AnchorQuote:
        quote = AnchorQuote(
            price=self.config.static_anchor_price_required,
            source=self.oracle_name,
            confidence=self.config.static_anchor_confidence,
            timestamp=time.time(),
        )
        return self.validate_quote(quote)
