from __future__ import annotations

from dataclasses import replace

from ..domain import (
    AnchorQuote,
    NoPriceReason,
    PathPriceEstimate,
    PoolSnapshot,
    PriceResult,
)
from ..logger import get_logger
from ..settings import PricingSettings
from .liquidity import LiquidityBook, value_pool_liquidity
from .outlier_filter import OutlierFilter
from .path_finder import PathFinder
from .path_weighter import PathWeighter
from .pool_graph import GraphStats, PoolGraph
from .price_aggregator import PriceAggregator
from .rate_calculator import RateCalculator

logger = get_logger(__name__)


def dedupe_estimates(estimates: list[PathPriceEstimate]) -> list[PathPriceEstimate]:
    """Drop estimates that priced exactly the same pools.

    Paths that only differ after a stablecoin pin produce identical rates
    from identical pools; counting each would inflate the path count.
    The first estimate in discovery order is kept.
    """
    seen: set[tuple[tuple[str, ...], str | None]] = set()
    unique: list[PathPriceEstimate] = []
    for estimate in estimates:
        key = (
            tuple(pool.id for pool in estimate.priced_pools),
            estimate.pinned_at.id if estimate.pinned_at else None,
        )
        if key in seen:
            continue
        seen.add(key)
        unique.append(estimate)
    return unique


class PriceDiscoveryEngine:
    """Prices tokens against the anchor for one immutable pool snapshot.

    All derived state (graph, USD liquidity) is computed once up front, so
    ``price`` is a pure read and safe to call from several threads.
    """

    def __init__(
        self,
        snapshot: PoolSnapshot,
        anchor_quote: AnchorQuote,
        settings: PricingSettings | None = None,
    ):
        self.settings = settings or PricingSettings()
        self.snapshot = snapshot
        self.anchor_quote = anchor_quote
        self.anchor_token_id = self.settings.anchor_token_id
        # POOL vault contracts double as their LP token
        self.lp_token_ids = frozenset(pool.id for pool in snapshot.pools)

        self.graph = PoolGraph.build(snapshot)
        self.liquidity: LiquidityBook = value_pool_liquidity(
            self.graph, anchor_quote.price, self.settings.discovery_max_cycles
        )
        self.finder = PathFinder(self.graph, self.settings.max_hops)
        self.calculator = RateCalculator(
            self.liquidity,
            anchor_quote.price,
            snapshot.as_of,
            include_fees=self.settings.include_fees,
            path_liquidity_scale_usd=self.settings.confidence.path_liquidity_scale_usd,
        )
        self.aggregator = PriceAggregator(
            self.graph.tokens,
            anchor_quote,
            outlier_filter=OutlierFilter(self.settings.outlier_max_deviation),
            weighter=PathWeighter(self.settings.weighting),
            confidence=self.settings.confidence,
            min_surviving_paths=self.settings.min_surviving_paths,
        )

        if self.graph.token(self.anchor_token_id) is None:
            logger.warning(
                "Anchor token %s is not in snapshot %s; only stablecoins can be priced",
                self.anchor_token_id,
                snapshot.version,
            )

    @property
    def version(self) -> str:
        return self.snapshot.version

    def stats(self) -> GraphStats:
        return self.graph.stats()

    def estimates(self, token_id: str) -> list[PathPriceEstimate]:
        """Priced, deduplicated path estimates for ``token_id``, before filtering."""
        paths = self.finder.find_paths(token_id, self.anchor_token_id)
        estimates = self.calculator.compute_rates(paths)
        unique = dedupe_estimates(estimates)
        logger.debug(
            "%s: %d paths, %d priced, %d unique",
            token_id,
            len(paths),
            len(estimates),
            len(unique),
        )
        return unique

    def price(self, token_id: str) -> PriceResult:
        """Compute the USD price of ``token_id``.

        Args:
            token_id: Contract id of the token to price

        Returns:
            PriceResult. Unknown tokens and tokens without usable paths
            produce a result with ``usd_price=None`` rather than an error.
            LP tokens are priced from their market paths like any other
            token and flagged with ``is_lp_token``.
        """
        result = self._price(token_id)
        if token_id in self.lp_token_ids:
            result = replace(result, is_lp_token=True)
        return result

    def _price(self, token_id: str) -> PriceResult:
        token = self.graph.token(token_id)
        if token is None:
            logger.info("Token %s is not in snapshot %s", token_id, self.version)
            return self.aggregator.no_price(token_id, NoPriceReason.UNKNOWN_TOKEN)

        if token.is_anchor or token.is_stablecoin:
            return self.aggregator.aggregate(token_id, [])

        result = self.aggregator.aggregate(token_id, self.estimates(token_id))
        if result.priced:
            logger.debug(
                "Priced %s at $%.8g (confidence %.3f, %d paths)",
                token.label,
                result.usd_price,
                result.confidence,
                result.calculation_details.paths_used,
            )
        else:
            logger.info("No price for %s: %s", token.label, result.reason.value)
        return result
