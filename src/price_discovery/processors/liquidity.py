from __future__ import annotations

import math
from dataclasses import dataclass, field

from ..domain import Pool
from ..logger import get_logger
from ..units import atomic_to_decimal, is_valid_rate
from .pool_graph import PoolGraph

logger = get_logger(__name__)


@dataclass(frozen=True)
class LiquidityBook:
    """USD valuation of every pool in one graph.

    ``token_prices`` are reference prices used only to put pools of
    different pairs on a common USD scale; they are not the published
    prices.
    """

    token_prices: dict[str, float] = field(default_factory=dict)
    pool_liquidity: dict[str, float] = field(default_factory=dict)

    def liquidity(self, pool_id: str) -> float:
        return self.pool_liquidity.get(pool_id, 0.0)

    def token_price(self, token_id: str) -> float | None:
        return self.token_prices.get(token_id)

    def side_values(self, pool: Pool) -> tuple[float, float] | None:
        return pool_side_values(pool, self.token_prices)


def pool_side_values(
    pool: Pool, token_prices: dict[str, float]
) -> tuple[float, float] | None:
    """USD value held on each side of ``pool``, if both tokens are valued."""
    price_a = token_prices.get(pool.token_a.id)
    price_b = token_prices.get(pool.token_b.id)
    if price_a is None or price_b is None:
        return None
    value_a = atomic_to_decimal(pool.reserve_a, pool.token_a.decimals) * price_a
    value_b = atomic_to_decimal(pool.reserve_b, pool.token_b.decimals) * price_b
    return value_a, value_b


def _price_through_pool(pool: Pool, known_id: str, known_price: float) -> float | None:
    """Price the token opposite ``known_id`` from the pool's spot ratio."""
    known_token = pool.token_a if pool.token_a.id == known_id else pool.token_b
    unknown_token = pool.other(known_id)
    known_reserve, unknown_reserve = pool.reserves_from(known_id)

    known_decimal = atomic_to_decimal(known_reserve, known_token.decimals)
    unknown_decimal = atomic_to_decimal(unknown_reserve, unknown_token.decimals)
    if known_decimal <= 0 or unknown_decimal <= 0:
        return None

    price = known_price * known_decimal / unknown_decimal
    return price if is_valid_rate(price) else None


def discover_reference_prices(
    graph: PoolGraph, anchor_price: float, max_cycles: int = 10
) -> dict[str, float]:
    """Spread USD prices outwards from the anchor and stablecoins.

    Each cycle prices every token that shares a pool with an already priced
    token. When several pools could price the same token in one cycle, the
    pool holding the most USD on its known side wins. Pools pairing two
    stablecoins are ignored since both sides are pinned to 1.0 already.
    """
    prices: dict[str, float] = {}
    for token in graph.tokens.values():
        if token.is_anchor:
            prices[token.id] = anchor_price
        elif token.is_stablecoin:
            prices[token.id] = 1.0

    for cycle in range(1, max_cycles + 1):
        candidates: dict[str, tuple[float, float]] = {}  # token -> (depth, price)

        for pool in graph.pools:
            if pool.token_a.is_stablecoin and pool.token_b.is_stablecoin:
                continue
            for known, unknown in ((pool.token_a, pool.token_b), (pool.token_b, pool.token_a)):
                known_price = prices.get(known.id)
                if known_price is None or unknown.id in prices:
                    continue
                price = _price_through_pool(pool, known.id, known_price)
                if price is None:
                    continue
                known_reserve, _ = pool.reserves_from(known.id)
                depth = atomic_to_decimal(known_reserve, known.decimals) * known_price
                best = candidates.get(unknown.id)
                if best is None or depth > best[0]:
                    candidates[unknown.id] = (depth, price)

        if not candidates:
            logger.debug("Reference price discovery converged after %d cycles", cycle)
            break

        for token_id, (_, price) in candidates.items():
            prices[token_id] = price

    return prices


def value_pool_liquidity(
    graph: PoolGraph, anchor_price: float, max_cycles: int = 10
) -> LiquidityBook:
    """Value every pool at the geometric mean of its two sides in USD.

    Args:
        graph: Graph for the current snapshot
        anchor_price: USD price of the anchor token from the oracle
        max_cycles: Bound on reference-price discovery rounds

    Returns:
        LiquidityBook keyed by pool id. Pools whose tokens cannot be valued
        are recorded with zero liquidity.
    """
    if not is_valid_rate(anchor_price):
        raise ValueError(f"anchor_price must be positive and finite, got {anchor_price}")

    prices = discover_reference_prices(graph, anchor_price, max_cycles)
    pool_liquidity: dict[str, float] = {}

    for pool in graph.pools:
        sides = pool_side_values(pool, prices)
        if sides is None:
            pool_liquidity[pool.id] = 0.0
            continue
        liquidity = math.sqrt(sides[0] * sides[1])
        pool_liquidity[pool.id] = liquidity if math.isfinite(liquidity) else 0.0

    unvalued = sum(1 for value in pool_liquidity.values() if value == 0.0)
    logger.debug(
        "Valued %d pools (%d without a USD reference), %d tokens priced",
        len(pool_liquidity),
        unvalued,
        len(prices),
    )
    return LiquidityBook(token_prices=prices, pool_liquidity=pool_liquidity)
