from __future__ import annotations

from abc import ABC, abstractmethod

from ...domain import AnchorQuote
from ...settings import PricingSettings
from ...units import is_valid_rate


class AnchorOracleError(Exception):
    """Raised when no usable anchor price can be obtained."""


class BaseAnchorOracle(ABC):
    """Abstract base class for anchor (BTC/USD) price oracles."""

    def __init__(self, config: PricingSettings):
        self.config = config

    @property
    @abstractmethod
    def oracle_name(self) -> str:
        """Return the name of this oracle."""
        ...

    @abstractmethod
    async def fetch_quote(self) -> AnchorQuote:
        """Fetch the current anchor quote.

        Raises:
            AnchorOracleError: If the oracle is unreachable or its answer unusable
        """
        ...

    def validate_quote(self, quote: AnchorQuote) -> AnchorQuote:
        """Reject non-positive prices and out-of-range confidences."""
        if not is_valid_rate(quote.price):
            raise AnchorOracleError(
                f"{self.oracle_name} returned a non-positive anchor price: {quote.price}"
            )
        if not 0 <= quote.confidence <= 1:
            raise AnchorOracleError(
                f"{self.oracle_name} returned confidence {quote.confidence} outside [0, 1]"
            )
        return quote
