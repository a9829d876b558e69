from __future__ import annotations

import math

from ..domain import (
    AnchorQuote,
    CalculationDetails,
    NoPriceReason,
    PathPriceEstimate,
    PriceResult,
    PriceSource,
    Token,
    WeightedEstimate,
)
from ..logger import get_logger
from ..settings import ConfidenceSettings
from .outlier_filter import OutlierFilter
from .path_weighter import PathWeighter

logger = get_logger(__name__)

STABLECOIN_USD_PRICE = 1.0


def weighted_variation(weighted: list[WeightedEstimate]) -> float:
    """Weighted coefficient of variation of the path rates.

    Zero for a single path; otherwise the weighted standard deviation
    divided by the weighted mean.
    """
    if len(weighted) <= 1:
        return 0.0

    total_weight = sum(item.weight for item in weighted)
    if total_weight <= 0:
        return 0.0

    mean = sum(item.estimate.implied_rate * item.weight for item in weighted) / total_weight
    variance = (
        sum(((item.estimate.implied_rate - mean) ** 2) * item.weight for item in weighted)
        / total_weight
    )
    return math.sqrt(variance) / mean


class PriceAggregator:
    """Combines path estimates into one USD price with a confidence score."""

    def __init__(
        self,
        tokens: dict[str, Token],
        anchor_quote: AnchorQuote,
        *,
        outlier_filter: OutlierFilter | None = None,
        weighter: PathWeighter | None = None,
        confidence: ConfidenceSettings | None = None,
        min_surviving_paths: int = 1,
    ):
        self.tokens = tokens
        self.anchor_quote = anchor_quote
        self.outlier_filter = outlier_filter or OutlierFilter()
        self.weighter = weighter or PathWeighter()
        self.confidence = confidence or ConfidenceSettings()
        self.min_surviving_paths = min_surviving_paths

    def _anchor_result(self, token_id: str) -> PriceResult:
        quote = self.anchor_quote
        return PriceResult(
            token_id=token_id,
            usd_price=quote.price,
            confidence=quote.confidence,
            calculation_details=CalculationDetails(anchor_price=quote.price),
            source=PriceSource.ORACLE,
            anchor_ratio=1.0,
        )

    def _stablecoin_result(self, token_id: str) -> PriceResult:
        return PriceResult(
            token_id=token_id,
            usd_price=STABLECOIN_USD_PRICE,
            confidence=1.0,
            calculation_details=CalculationDetails(anchor_price=self.anchor_quote.price),
            source=PriceSource.STABLECOIN,
            anchor_ratio=STABLECOIN_USD_PRICE / self.anchor_quote.price,
        )

    def no_price(
        self, token_id: str, reason: NoPriceReason, discarded: int = 0
    ) -> PriceResult:
        """Result for a token that has no usable market data."""
        return PriceResult(
            token_id=token_id,
            usd_price=None,
            confidence=0.0,
            calculation_details=CalculationDetails(
                anchor_price=self.anchor_quote.price,
                paths_discarded=discarded,
            ),
            source=PriceSource.NONE,
            reason=reason,
        )

    def score_confidence(
        self, weighted: list[WeightedEstimate], variation: float
    ) -> tuple[float, bool]:
        """Blend agreement, depth and corroboration into a 0-1 score.

        Returns:
            (confidence, stale) where ``stale`` is True when every path
            is older than the configured staleness threshold
        """
        cfg = self.confidence
        total_liquidity = sum(item.estimate.total_liquidity for item in weighted)

        consistency = max(0.0, 1.0 - variation)
        liquidity_score = min(1.0, total_liquidity / cfg.liquidity_scale_usd)
        path_count_score = min(1.0, len(weighted) / cfg.target_path_count)

        score = (
            consistency * cfg.consistency_weight
            + liquidity_score * cfg.liquidity_weight
            + path_count_score * cfg.path_count_weight
        ) * self.anchor_quote.confidence

        stale = all(item.estimate.age_seconds > cfg.stale_after_seconds for item in weighted)
        if stale:
            score *= cfg.stale_penalty

        return min(1.0, max(0.0, score)), stale

    def aggregate(self, token_id: str, estimates: list[PathPriceEstimate]) -> PriceResult:
        """Combine path estimates for ``token_id`` into a PriceResult.

        Args:
            token_id: Token being priced
            estimates: Unfiltered estimates for every discovered path

        Returns:
            PriceResult. The anchor is priced by the oracle and stablecoins
            are pinned to 1.0 USD without looking at ``estimates``. When no
            path survives outlier filtering the result carries no price and
            a zero confidence instead of raising.
        """
        token = self.tokens.get(token_id)
        if token is not None and token.is_anchor:
            return self._anchor_result(token_id)
        if token is not None and token.is_stablecoin:
            return self._stablecoin_result(token_id)

        if not estimates:
            return self.no_price(token_id, NoPriceReason.NO_PATHS)

        outcome = self.outlier_filter.evaluate(estimates)
        if len(outcome.kept) < self.min_surviving_paths:
            logger.info(
                "Insufficient data for %s: %d of %d paths survived outlier filtering",
                token_id,
                len(outcome.kept),
                len(estimates),
            )
            return self.no_price(
                token_id, NoPriceReason.INSUFFICIENT_DATA, discarded=len(outcome.dropped)
            )

        ranked = self.weighter.rank(outcome.kept)
        total_weight = sum(item.weight for item in ranked)
        anchor_ratio = (
            sum(item.estimate.implied_rate * item.weight for item in ranked) / total_weight
        )
        usd_price = anchor_ratio * self.anchor_quote.price

        variation = weighted_variation(ranked)
        confidence, stale = self.score_confidence(ranked, variation)
        if stale:
            logger.warning(
                "All %d paths for %s are stale; confidence lowered to %.3f",
                len(ranked),
                token_id,
                confidence,
            )

        details = CalculationDetails(
            anchor_price=self.anchor_quote.price,
            paths_used=len(ranked),
            paths_discarded=len(outcome.dropped),
            total_liquidity=sum(item.estimate.total_liquidity for item in ranked),
            price_variation=variation,
            stale=stale,
        )

        return PriceResult(
            token_id=token_id,
            usd_price=usd_price,
            confidence=confidence,
            calculation_details=details,
            source=PriceSource.MARKET,
            anchor_ratio=anchor_ratio,
            primary_path=ranked[0],
            alternative_paths=tuple(ranked[1:]),
        )
