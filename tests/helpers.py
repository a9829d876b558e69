"""Builders and sample tokens shared by the test modules."""

from __future__ import annotations

from price_discovery.constants import SBTC_CONTRACT_ID
from price_discovery.domain import (
    Path,
    PathPriceEstimate,
    Pool,
    PoolSnapshot,
    Token,
)

NOW = 1_700_000_000.0
ANCHOR_PRICE = 50_000.0

SBTC = Token(SBTC_CONTRACT_ID, 8, "sBTC", is_anchor=True)
USDC = Token("SP3Y2ZSH8P7D50B0VBTSX11S7XSG24M1VB9YFQA4K.token-aeusdc", 6, "aeUSDC", is_stablecoin=True)
USDT = Token("SP2XD7417HGPRTREMKF748VNEQPDRR0RMANB7X1NK.token-susdt", 8, "sUSDT", is_stablecoin=True)
WELSH = Token("SP3NE50GEXFG9SZGTT51P40X2CKYSZ5CC4ZTZ7A2G.welshcorgicoin-token", 6, "WELSH")
CHA = Token("SP2ZNGJ85ENDY6QRHQ5P2D4FXKGZWCKTB2T0Z55KS.charisma-token", 6, "CHA")
ORPHAN = Token("SP000000000000000000002Q6VF78.orphan-token", 6, "ORPH")
LONELY = Token("SP000000000000000000002Q6VF78.lonely-token", 6, "LONE")

def make_pool(
    pool_id: str,
    token_a: Token,
    token_b: Token,
    reserve_a: int,
    reserve_b: int,
    *,
    fee_rate: float = 0.0,
    last_updated: float = NOW,
) -> Pool:
    return Pool(
        id=pool_id,
        token_a=token_a,
        token_b=token_b,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        fee_rate=fee_rate,
        last_updated=last_updated,
    )

def make_snapshot(
    pools: list[Pool],
    tokens: list[Token] | None = None,
    *,
    as_of: float = NOW,
    version: str = "v1",
) -> PoolSnapshot:
    registry: dict[str, Token] = {}
    for pool in pools:
        registry.setdefault(pool.token_a.id, pool.token_a)
        registry.setdefault(pool.token_b.id, pool.token_b)
    for token in tokens or []:
        registry.setdefault(token.id, token)
    return PoolSnapshot(tokens=registry, pools=tuple(pools), as_of=as_of, version=version)

def make_estimate(
    rate: float,
    *,
    hops: int = 1,
    liquidity: float = 50_000.0,
    reliability: float = 1.0,
    confidence: float = 1.0,
    age: float = 0.0,
    name: str = "p",
) -> PathPriceEstimate:
    """Estimate over a synthetic path of ``hops`` pools ending at sBTC."""
    intermediates = [Token(f"SP.{name}-mid-{i}", 6) for i in range(hops - 1)]
    tokens = (WELSH, *intermediates, SBTC)
    pools = tuple(
        make_pool(f"{name}-pool-{i}", tokens[i], tokens[i + 1], 1, 1) for i in range(hops)
    )
    return PathPriceEstimate(
        path=Path(tokens=tokens, pools=pools),
        implied_rate=rate,
        total_liquidity=liquidity,
        reliability=reliability,
        confidence=confidence,
        age_seconds=age,
    )
