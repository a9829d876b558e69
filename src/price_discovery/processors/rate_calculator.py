from __future__ import annotations

import math

from ..domain import Path, PathPriceEstimate, Pool, Token
from ..logger import TRACE, get_logger
from ..units import atomic_to_decimal, is_valid_rate
from .liquidity import LiquidityBook

logger = get_logger(__name__)


class RateCalculator:
    """Turns a path into a decimal-aware token-to-anchor exchange rate.

    Rates are spot rates (reserve ratios) unless ``include_fees`` is set,
    in which case every hop is discounted by its pool fee.

    A hop that starts at a stablecoin is never priced from reserves: the
    stablecoin is worth 1.0 USD, so the remainder of the path collapses to
    ``1 / anchor_price`` anchor units and its pools are ignored.
    """

    def __init__(
        self,
        liquidity: LiquidityBook,
        anchor_price: float,
        as_of: float,
        *,
        include_fees: bool = False,
        path_liquidity_scale_usd: float = 50_000.0,
    ):
        if not is_valid_rate(anchor_price):
            raise ValueError(f"anchor_price must be positive and finite, got {anchor_price}")
        self.liquidity = liquidity
        self.anchor_price = anchor_price
        self.as_of = as_of
        self.include_fees = include_fees
        self.path_liquidity_scale_usd = path_liquidity_scale_usd

    def hop_rate(self, pool: Pool, source: Token, dest: Token) -> float | None:
        """Units of ``dest`` per one unit of ``source`` at the pool's spot price."""
        in_reserve, out_reserve = pool.reserves_from(source.id)
        in_decimal = atomic_to_decimal(in_reserve, source.decimals)
        out_decimal = atomic_to_decimal(out_reserve, dest.decimals)
        if in_decimal <= 0 or out_decimal <= 0:
            return None

        rate = out_decimal / in_decimal
        if self.include_fees:
            rate *= 1 - pool.fee_rate
        return rate if is_valid_rate(rate) else None

    def hop_balance(self, pool: Pool) -> float:
        """Ratio of the smaller to the larger side of ``pool`` in USD."""
        sides = self.liquidity.side_values(pool)
        if sides is None:
            return 1.0
        low, high = sorted(sides)
        if high <= 0:
            return 0.0
        return low / high

    def compute_rate(self, path: Path) -> PathPriceEstimate | None:
        """Price ``path`` and score it.

        Args:
            path: Route from the query token to the anchor

        Returns:
            PathPriceEstimate, or None when any hop yields an unusable rate
        """
        rate = 1.0
        priced: list[Pool] = []
        pinned_at: Token | None = None

        for index, pool in enumerate(path.pools):
            source = path.tokens[index]
            dest = path.tokens[index + 1]

            if source.is_stablecoin:
                pinned_at = source
                rate /= self.anchor_price
                break

            hop = self.hop_rate(pool, source, dest)
            if hop is None:
                logger.debug(
                    "Unusable hop %s -> %s in pool %s", source.label, dest.label, pool.id
                )
                return None
            rate *= hop
            priced.append(pool)
            logger.log(
                TRACE,
                "Hop %d %s -> %s via %s: rate=%g, cumulative=%g",
                index + 1,
                source.label,
                dest.label,
                pool.id,
                hop,
                rate,
            )

        if not is_valid_rate(rate):
            logger.debug("Invalid final rate %r for path %s", rate, path.describe())
            return None

        if priced:
            total_liquidity = min(self.liquidity.liquidity(pool.id) for pool in priced)
            age_seconds = max(max(0.0, self.as_of - pool.last_updated) for pool in priced)
            balance = sum(self.hop_balance(pool) for pool in priced) / len(priced)
        else:
            total_liquidity = 0.0
            age_seconds = 0.0
            balance = 1.0

        reliability = balance / math.sqrt(max(1, path.length))
        confidence = min(1.0, total_liquidity / self.path_liquidity_scale_usd)

        return PathPriceEstimate(
            path=path,
            implied_rate=rate,
            total_liquidity=total_liquidity,
            reliability=reliability,
            confidence=confidence,
            age_seconds=age_seconds,
            pinned_at=pinned_at,
        )

    def compute_rates(self, paths: list[Path]) -> list[PathPriceEstimate]:
        """Price every path, dropping those that cannot be priced."""
        estimates: list[PathPriceEstimate] = []
        for path in paths:
            estimate = self.compute_rate(path)
            if estimate is not None:
                estimates.append(estimate)
        return estimates
