"""Domain models for price discovery."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class PriceSource(str, Enum):
    ORACLE = "oracle"
    STABLECOIN = "stablecoin"
    MARKET = "market"
    NONE = "none"


class NoPriceReason(str, Enum):
    NO_PATHS = "no_paths"
    INSUFFICIENT_DATA = "insufficient_data"
    UNKNOWN_TOKEN = "unknown_token"


@dataclass(frozen=True)
class Token:
    """A fungible token as seen by one pricing cycle."""

    id: str
    decimals: int
    symbol: str = ""
    is_stablecoin: bool = False
    is_anchor: bool = False

    @property
    def label(self) -> str:
        return self.symbol or self.id[-8:]


@dataclass(frozen=True)
class Pool:
    """A constant-product liquidity pool with atomic-unit reserves."""

    id: str
    token_a: Token
    token_b: Token
    reserve_a: int
    reserve_b: int
    fee_rate: float = 0.0
    last_updated: float = 0.0

    def other(self, token_id: str) -> Token:
        """Return the token on the opposite side of ``token_id``."""
        if token_id == self.token_a.id:
            return self.token_b
        if token_id == self.token_b.id:
            return self.token_a
        raise ValueError(f"Token {token_id} is not part of pool {self.id}")

    def reserves_from(self, token_id: str) -> tuple[int, int]:
        """Return (input_reserve, output_reserve) when trading out of ``token_id``."""
        if token_id == self.token_a.id:
            return self.reserve_a, self.reserve_b
        if token_id == self.token_b.id:
            return self.reserve_b, self.reserve_a
        raise ValueError(f"Token {token_id} is not part of pool {self.id}")


@dataclass(frozen=True)
class Path:
    """Ordered route from a query token to the anchor."""

    tokens: tuple[Token, ...]
    pools: tuple[Pool, ...]

    @property
    def length(self) -> int:
        return len(self.pools)

    @property
    def start(self) -> Token:
        return self.tokens[0]

    @property
    def end(self) -> Token:
        return self.tokens[-1]

    def describe(self) -> str:
        return " -> ".join(token.label for token in self.tokens)


@dataclass(frozen=True)
class PathPriceEstimate:
    """Exchange rate and quality metrics for a single path."""

    path: Path
    implied_rate: float  # anchor units per one query token
    total_liquidity: float  # USD, bottleneck hop
    reliability: float
    confidence: float
    age_seconds: float
    pinned_at: Token | None = None

    @property
    def hop_count(self) -> int:
        return self.path.length

    @property
    def priced_pools(self) -> tuple[Pool, ...]:
        """Pools that actually contributed to ``implied_rate``."""
        if self.pinned_at is None:
            return self.path.pools
        index = self.path.tokens.index(self.pinned_at)
        return self.path.pools[:index]


@dataclass(frozen=True)
class AnchorQuote:
    """USD quote for the anchor asset as reported by an oracle."""

    price: float
    source: str
    confidence: float
    timestamp: float


@dataclass(frozen=True)
class PoolSnapshot:
    """Point-in-time view of the token registry and pool reserves."""

    tokens: dict[str, Token]
    pools: tuple[Pool, ...]
    as_of: float
    version: str
    skipped_records: int = 0


@dataclass(frozen=True)
class CalculationDetails:
    anchor_price: float
    paths_used: int = 0
    paths_discarded: int = 0
    total_liquidity: float = 0.0
    price_variation: float = 0.0
    stale: bool = False


@dataclass(frozen=True)
class WeightedEstimate:
    estimate: PathPriceEstimate
    weight: float


@dataclass(frozen=True)
class PriceResult:
    """Final USD price for a token, or the reason none could be derived."""

    token_id: str
    usd_price: float | None
    confidence: float
    calculation_details: CalculationDetails
    source: PriceSource = PriceSource.MARKET
    anchor_ratio: float | None = None
    primary_path: WeightedEstimate | None = None
    alternative_paths: tuple[WeightedEstimate, ...] = field(default_factory=tuple)
    reason: NoPriceReason | None = None
    is_lp_token: bool = False

    @property
    def priced(self) -> bool:
        return self.usd_price is not None
