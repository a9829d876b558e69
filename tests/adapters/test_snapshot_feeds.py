from __future__ import annotations

import json

import pytest
import requests

from price_discovery.adapters import get_snapshot_feed
from price_discovery.adapters.snapshot_feeds import (
    DexCacheSnapshotFeed,
    FileSnapshotFeed,
    SnapshotFeedError,
    build_snapshot,
)
from price_discovery.constants import SBTC_CONTRACT_ID
from price_discovery.settings import PricingSettings, SnapshotSource

WELSH_ID = "SP3NE50GEXFG9SZGTT51P40X2CKYSZ5CC4ZTZ7A2G.welshcorgicoin-token"
USDC_ID = "SP3Y2ZSH8P7D50B0VBTSX11S7XSG24M1VB9YFQA4K.token-aeusdc"


def vault(contract_id, token_a, token_b, reserves_a, reserves_b, **extra):
    record = {
        "type": "POOL",
        "protocol": "CHARISMA",
        "contractId": contract_id,
        "fee": 3000,
        "tokenA": token_a,
        "tokenB": token_b,
        "reservesA": reserves_a,
        "reservesB": reserves_b,
        "reservesLastUpdatedAt": 1_700_000_000_000,
    }
    record.update(extra)
    return record


SBTC_RECORD = {"contractId": SBTC_CONTRACT_ID, "symbol": "sBTC", "decimals": 8}
WELSH_RECORD = {"contractId": WELSH_ID, "symbol": "WELSH", "decimals": 6}
USDC_RECORD = {"contractId": USDC_ID, "symbol": "aeUSDC", "decimals": 6}

VAULTS = [
    vault("SP.welsh-sbtc", WELSH_RECORD, SBTC_RECORD, 10**12, 10**8),
    vault("SP.welsh-usdc", WELSH_RECORD, USDC_RECORD, 10**12, 5 * 10**10),
    {"type": "SUBLINK", "contractId": "SP.sublink"},
    {"type": "POOL", "contractId": "SP.broken", "tokenA": WELSH_RECORD},
]


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


def test_build_snapshot_maps_records(settings):
    snapshot = build_snapshot(VAULTS, settings, as_of=1_700_000_100.0, version="abc")

    assert snapshot.version == "abc"
    assert [pool.id for pool in snapshot.pools] == ["SP.welsh-sbtc", "SP.welsh-usdc"]
    assert snapshot.skipped_records == 1

    pool = snapshot.pools[0]
    assert pool.fee_rate == pytest.approx(0.003)
    assert pool.last_updated == pytest.approx(1_700_000_000.0)
    assert snapshot.tokens[SBTC_CONTRACT_ID].is_anchor
    assert snapshot.tokens[USDC_ID].is_stablecoin
    assert not snapshot.tokens[WELSH_ID].is_stablecoin
    assert pool.token_a is snapshot.tokens[WELSH_ID]


def test_build_snapshot_explicit_stablecoin_flag_wins(settings):
    usdc = dict(USDC_RECORD, isStablecoin=False)
    snapshot = build_snapshot(
        [vault("SP.p", WELSH_RECORD, usdc, 1, 1)], settings, as_of=0.0
    )
    assert not snapshot.tokens[USDC_ID].is_stablecoin


def test_build_snapshot_skips_conflicting_decimals(settings):
    wrong = dict(WELSH_RECORD, decimals=8)
    records = [
        vault("SP.a", WELSH_RECORD, SBTC_RECORD, 1, 1),
        vault("SP.b", wrong, SBTC_RECORD, 1, 1),
    ]
    snapshot = build_snapshot(records, settings, as_of=0.0)

    assert [pool.id for pool in snapshot.pools] == ["SP.a"]
    assert snapshot.skipped_records == 1


def test_undated_pools_use_snapshot_time(settings):
    record = vault("SP.a", WELSH_RECORD, SBTC_RECORD, 1, 1)
    del record["reservesLastUpdatedAt"]
    snapshot = build_snapshot([record], settings, as_of=42.0)
    assert snapshot.pools[0].last_updated == 42.0


def test_version_is_content_hash(settings):
    first = build_snapshot(VAULTS, settings, as_of=0.0)
    second = build_snapshot(list(VAULTS), settings, as_of=99.0)
    changed = build_snapshot(VAULTS[:1], settings, as_of=0.0)

    assert first.version == second.version
    assert first.version != changed.version


@pytest.mark.asyncio
async def test_dex_cache_feed_fetches_vaults(settings, monkeypatch):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append(url)
        return FakeResponse({"data": VAULTS})

    monkeypatch.setattr(requests, "get", fake_get)

    snapshot = await DexCacheSnapshotFeed(settings).fetch_snapshot()

    assert calls == ["https://invest.charisma.rocks/api/v1/vaults"]
    assert len(snapshot.pools) == 2


@pytest.mark.asyncio
async def test_dex_cache_feed_unreachable(settings, monkeypatch):
    def fake_get(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "get", fake_get)

    with pytest.raises(SnapshotFeedError, match="unavailable"):
        await DexCacheSnapshotFeed(settings).fetch_snapshot()


@pytest.mark.asyncio
async def test_dex_cache_feed_rejects_unexpected_payload(settings, monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({"error": "nope"}))

    with pytest.raises(SnapshotFeedError, match="Unexpected vaults payload"):
        await DexCacheSnapshotFeed(settings).fetch_snapshot()


@pytest.mark.asyncio
async def test_file_feed_reads_document(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"asOf": 1_700_000_500, "version": "saved", "vaults": VAULTS}))
    settings = PricingSettings(snapshot_source=SnapshotSource.FILE, snapshot_file=path)

    feed = get_snapshot_feed(settings)
    snapshot = await feed.fetch_snapshot()

    assert isinstance(feed, FileSnapshotFeed)
    assert snapshot.version == "saved"
    assert snapshot.as_of == 1_700_000_500
    assert len(snapshot.pools) == 2


@pytest.mark.asyncio
async def test_file_feed_accepts_bare_list(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(VAULTS))
    settings = PricingSettings(snapshot_source=SnapshotSource.FILE, snapshot_file=path)

    snapshot = await FileSnapshotFeed(settings).fetch_snapshot()

    assert len(snapshot.pools) == 2
    assert snapshot.as_of == pytest.approx(path.stat().st_mtime)


@pytest.mark.asyncio
async def test_file_feed_missing_file(tmp_path):
    settings = PricingSettings(
        snapshot_source=SnapshotSource.FILE, snapshot_file=tmp_path / "missing.json"
    )
    with pytest.raises(SnapshotFeedError, match="Cannot read snapshot file"):
        await FileSnapshotFeed(settings).fetch_snapshot()
