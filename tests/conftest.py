from __future__ import annotations

import pytest

from helpers import (
    ANCHOR_PRICE,
    CHA,
    LONELY,
    NOW,
    ORPHAN,
    SBTC,
    USDC,
    WELSH,
    make_pool,
    make_snapshot,
)
from price_discovery.domain import AnchorQuote, PoolSnapshot


@pytest.fixture
def anchor_quote() -> AnchorQuote:
    return AnchorQuote(price=ANCHOR_PRICE, source="test", confidence=1.0, timestamp=NOW)


@pytest.fixture
def market_snapshot() -> PoolSnapshot:
    """Small market where WELSH trades at 0.05 USD and CHA at 0.10 USD.

    WELSH pairs with sBTC directly and with USDC; CHA only trades
    against WELSH (its sBTC pool is empty); ORPHAN and LONELY only
    trade with each other.
    """
    pools = [
        make_pool("welsh-sbtc", WELSH, SBTC, 1_000_000 * 10**6, 1 * 10**8),
        make_pool("welsh-usdc", WELSH, USDC, 1_000_000 * 10**6, 50_000 * 10**6),
        make_pool("usdc-sbtc", USDC, SBTC, 100_000 * 10**6, 2 * 10**8),
        make_pool("cha-welsh", CHA, WELSH, 100_000 * 10**6, 200_000 * 10**6),
        make_pool("cha-sbtc", CHA, SBTC, 0, 10**8),
        make_pool("orphan-lonely", ORPHAN, LONELY, 10**6, 10**6),
    ]
    return make_snapshot(pools)
