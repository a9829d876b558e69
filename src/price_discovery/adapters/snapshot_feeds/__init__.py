from __future__ import annotations

from ...settings import SnapshotSource
from .base import BaseSnapshotFeed, SnapshotFeedError, build_snapshot
from .dex_cache import DexCacheSnapshotFeed
from .file import FileSnapshotFeed

SNAPSHOT_FEEDS: dict[SnapshotSource, type[BaseSnapshotFeed]] = {
    SnapshotSource.DEX_CACHE: DexCacheSnapshotFeed,
    SnapshotSource.FILE: FileSnapshotFeed,
}

__all__ = [
    "SNAPSHOT_FEEDS",
    "BaseSnapshotFeed",
    "SnapshotFeedError",
    "build_snapshot",
    "DexCacheSnapshotFeed",
    "FileSnapshotFeed",
]
