from __future__ import annotations

import pytest

from helpers import (
    ANCHOR_PRICE,
    CHA,
    NOW,
    ORPHAN,
    SBTC,
    USDC,
    USDT,
    WELSH,
    make_pool,
    make_snapshot,
)
from price_discovery.domain import AnchorQuote, NoPriceReason, PriceSource, Token
from price_discovery.processors import PriceDiscoveryEngine, dedupe_estimates
from price_discovery.settings import PricingSettings


@pytest.fixture
def settings():
    return PricingSettings()


@pytest.fixture
def engine(market_snapshot, anchor_quote, settings):
    return PriceDiscoveryEngine(market_snapshot, anchor_quote, settings)


def test_prices_token_with_direct_and_stablecoin_paths(engine):
    result = engine.price(WELSH.id)

    assert result.source is PriceSource.MARKET
    assert result.usd_price == pytest.approx(0.05)
    assert result.calculation_details.paths_used == 2
    assert result.calculation_details.price_variation == pytest.approx(0.0, abs=1e-9)
    assert result.primary_path is not None
    assert len(result.alternative_paths) == 1


def test_prices_token_without_direct_anchor_pool(engine):
    result = engine.price(CHA.id)

    assert result.usd_price == pytest.approx(0.10)
    for weighted in (result.primary_path, *result.alternative_paths):
        assert weighted.estimate.path.end == SBTC
        assert "cha-sbtc" not in {pool.id for pool in weighted.estimate.path.pools}


def test_anchor_and_stablecoin_short_circuit(engine, anchor_quote):
    anchor = engine.price(SBTC.id)
    stable = engine.price(USDC.id)

    assert anchor.usd_price == anchor_quote.price
    assert anchor.source is PriceSource.ORACLE
    assert stable.usd_price == 1.0
    assert stable.confidence == 1.0


def test_unknown_and_isolated_tokens(engine):
    unknown = engine.price("SP.not-listed")
    isolated = engine.price(ORPHAN.id)

    assert unknown.usd_price is None
    assert unknown.reason is NoPriceReason.UNKNOWN_TOKEN
    assert isolated.usd_price is None
    assert isolated.reason is NoPriceReason.NO_PATHS
    assert isolated.confidence == 0.0


def test_zero_reserve_pool_never_used(engine):
    assert engine.graph.pool("cha-sbtc") is None


def test_pricing_is_idempotent(engine):
    assert engine.price(WELSH.id) == engine.price(WELSH.id)
    assert engine.price(CHA.id) == engine.price(CHA.id)


def test_max_hops_setting_limits_paths(market_snapshot, anchor_quote):
    settings = PricingSettings(max_hops=2)
    engine = PriceDiscoveryEngine(market_snapshot, anchor_quote, settings)

    result = engine.price(CHA.id)

    assert result.calculation_details.paths_used == 1
    assert result.primary_path.estimate.hop_count == 2


def test_pinned_duplicates_are_collapsed(anchor_quote, settings):
    pools = [
        make_pool("welsh-usdc", WELSH, USDC, 1_000_000 * 10**6, 50_000 * 10**6),
        make_pool("usdc-sbtc", USDC, SBTC, 100_000 * 10**6, 2 * 10**8),
        make_pool("usdc-usdt", USDC, USDT, 100_000 * 10**6, 100_000 * 10**8),
        make_pool("usdt-sbtc", USDT, SBTC, 100_000 * 10**8, 2 * 10**8),
    ]
    engine = PriceDiscoveryEngine(make_snapshot(pools), anchor_quote, settings)

    paths = engine.finder.find_paths(WELSH.id, SBTC.id)
    estimates = engine.estimates(WELSH.id)

    assert len(paths) == 2
    assert len(estimates) == 1
    assert estimates[0].pinned_at == USDC
    assert engine.price(WELSH.id).usd_price == pytest.approx(0.05)


def test_dedupe_keeps_first_in_discovery_order(engine):
    estimates = engine.calculator.compute_rates(
        engine.finder.find_paths(WELSH.id, SBTC.id)
    )
    assert dedupe_estimates(estimates + estimates) == estimates


def test_stale_snapshot_lowers_confidence(anchor_quote, settings):
    def snapshot(last_updated):
        pools = [
            make_pool("welsh-sbtc", WELSH, SBTC, 10**12, 10**8, last_updated=last_updated)
        ]
        return make_snapshot(pools)

    fresh = PriceDiscoveryEngine(snapshot(NOW), anchor_quote, settings).price(WELSH.id)
    stale = PriceDiscoveryEngine(
        snapshot(NOW - 2 * 86_400), anchor_quote, settings
    ).price(WELSH.id)

    assert stale.calculation_details.stale
    assert stale.usd_price == pytest.approx(fresh.usd_price)
    assert stale.confidence == pytest.approx(fresh.confidence * 0.25)


def test_missing_anchor_still_prices_stablecoins(settings):
    pools = [make_pool("welsh-usdc", WELSH, USDC, 10**12, 5 * 10**10)]
    quote = AnchorQuote(price=ANCHOR_PRICE, source="test", confidence=1.0, timestamp=NOW)
    engine = PriceDiscoveryEngine(make_snapshot(pools), quote, settings)

    assert engine.price(USDC.id).usd_price == 1.0
    assert engine.price(WELSH.id).reason is NoPriceReason.NO_PATHS


def test_disagreeing_paths_still_price_from_upper_middle(anchor_quote, settings):
    foo = Token("SP.foo-token", 6, "FOO")
    bar = Token("SP.bar-token", 6, "BAR")
    pools = [
        make_pool("foo-sbtc", foo, SBTC, 1_000 * 10**6, 1 * 10**8),
        make_pool("foo-bar", foo, bar, 1_000 * 10**6, 1_000 * 10**6),
        make_pool("bar-sbtc", bar, SBTC, 1_000 * 10**6, 4 * 10**8),
    ]
    engine = PriceDiscoveryEngine(make_snapshot(pools), anchor_quote, settings)

    result = engine.price(foo.id)

    assert result.reason is None
    assert result.anchor_ratio == pytest.approx(0.004)
    assert result.usd_price == pytest.approx(0.004 * ANCHOR_PRICE)
    assert result.primary_path.estimate.hop_count == 2
    assert result.calculation_details.paths_discarded == 1


def test_pool_contracts_are_flagged_as_lp_tokens(anchor_quote, settings):
    lp = Token("SP.welsh-sbtc", 6, "WELSH-sBTC-LP")
    pools = [
        make_pool("SP.welsh-sbtc", WELSH, SBTC, 10**12, 10**8),
        make_pool("SP.lp-sbtc", lp, SBTC, 1_000 * 10**6, 1 * 10**8),
    ]
    engine = PriceDiscoveryEngine(make_snapshot(pools), anchor_quote, settings)

    lp_result = engine.price(lp.id)
    welsh_result = engine.price(WELSH.id)

    assert lp_result.is_lp_token
    assert lp_result.usd_price == pytest.approx(0.001 * ANCHOR_PRICE)
    assert not welsh_result.is_lp_token


def test_untraded_lp_token_is_flagged_without_price(engine):
    result = engine.price("welsh-sbtc")

    assert result.is_lp_token
    assert result.reason is NoPriceReason.UNKNOWN_TOKEN
