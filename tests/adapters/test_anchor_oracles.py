from __future__ import annotations

import pytest
import requests

from price_discovery.adapters import get_anchor_oracle
from price_discovery.adapters.anchor_oracles import (
    AnchorOracleError,
    CoinGeckoAnchorOracle,
    DexCacheAnchorOracle,
    StaticAnchorOracle,
)
from price_discovery.settings import AnchorOracleSource, PricingSettings


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._payload


@pytest.fixture
def settings():
    return PricingSettings(http_retries=0)


@pytest.mark.asyncio
async def test_dex_cache_oracle_parses_quote(settings, monkeypatch):
    payload = {"price": 65_000.5, "confidence": 0.9, "timestamp": 1_700_000_000_000}
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse(payload))

    quote = await DexCacheAnchorOracle(settings).fetch_quote()

    assert quote.price == 65_000.5
    assert quote.confidence == 0.9
    assert quote.timestamp == pytest.approx(1_700_000_000)
    assert quote.source == "dex-cache"


@pytest.mark.asyncio
async def test_dex_cache_oracle_unwraps_data_envelope(settings, monkeypatch):
    payload = {"data": {"price": 60_000, "source": "kraken"}}
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse(payload))

    quote = await DexCacheAnchorOracle(settings).fetch_quote()

    assert quote.price == 60_000
    assert quote.confidence == 1.0
    assert quote.source == "kraken"


@pytest.mark.asyncio
async def test_dex_cache_oracle_rejects_bad_price(settings, monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({"price": 0}))

    with pytest.raises(AnchorOracleError, match="Malformed"):
        await DexCacheAnchorOracle(settings).fetch_quote()


@pytest.mark.asyncio
async def test_dex_cache_oracle_http_error(settings, monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({}, status_code=503))

    with pytest.raises(AnchorOracleError, match="unavailable"):
        await DexCacheAnchorOracle(settings).fetch_quote()


@pytest.mark.asyncio
async def test_transient_failure_is_retried(monkeypatch):
    settings = PricingSettings(http_retries=1)
    responses = [
        FakeResponse({}, status_code=503),
        FakeResponse({"price": 64_000}),
    ]
    monkeypatch.setattr(requests, "get", lambda *a, **k: responses.pop(0))

    quote = await DexCacheAnchorOracle(settings).fetch_quote()

    assert quote.price == 64_000
    assert responses == []


@pytest.mark.asyncio
async def test_coingecko_oracle_sends_api_key(monkeypatch):
    settings = PricingSettings(http_retries=0, coingecko_api_key="cg-key")
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.update(url=url, params=params, headers=headers)
        return FakeResponse({"bitcoin": {"usd": 66_000, "last_updated_at": 1_700_000_000}})

    monkeypatch.setattr(requests, "get", fake_get)

    quote = await CoinGeckoAnchorOracle(settings).fetch_quote()

    assert quote.price == 66_000.0
    assert quote.timestamp == 1_700_000_000
    assert seen["url"].endswith("/simple/price")
    assert seen["params"]["ids"] == "bitcoin"
    assert seen["headers"] == {"x-cg-demo-api-key": "cg-key"}


@pytest.mark.asyncio
async def test_coingecko_oracle_missing_price(settings, monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({"bitcoin": {}}))

    with pytest.raises(AnchorOracleError, match="no bitcoin/usd price"):
        await CoinGeckoAnchorOracle(settings).fetch_quote()


@pytest.mark.asyncio
async def test_static_oracle():
    settings = PricingSettings(
        anchor_oracle=AnchorOracleSource.STATIC,
        static_anchor_price=42_000.0,
        static_anchor_confidence=0.7,
    )

    oracle = get_anchor_oracle(settings)
    quote = await oracle.fetch_quote()

    assert isinstance(oracle, StaticAnchorOracle)
    assert quote.price == 42_000.0
    assert quote.confidence == 0.7
    assert quote.source == "static"
