from __future__ import annotations

from ..settings import PricingSettings
from .anchor_oracles import ANCHOR_ORACLES, AnchorOracleError, BaseAnchorOracle
from .snapshot_feeds import SNAPSHOT_FEEDS, BaseSnapshotFeed, SnapshotFeedError


def get_snapshot_feed(settings: PricingSettings) -> BaseSnapshotFeed:
    return SNAPSHOT_FEEDS[settings.snapshot_source](settings)


def get_anchor_oracle(settings: PricingSettings) -> BaseAnchorOracle:
    return ANCHOR_ORACLES[settings.anchor_oracle](settings)


__all__ = [
    "ANCHOR_ORACLES",
    "SNAPSHOT_FEEDS",
    "AnchorOracleError",
    "SnapshotFeedError",
    "get_anchor_oracle",
    "get_snapshot_feed",
]
