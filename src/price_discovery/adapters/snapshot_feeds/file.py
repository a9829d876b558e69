from __future__ import annotations

import asyncio
import json
from pathlib import Path

from pydantic import ValidationError

from ...domain import PoolSnapshot
from ...logger import get_logger
from ...settings import PricingSettings
from .base import BaseSnapshotFeed, SnapshotFeedError, build_snapshot
from .models import SnapshotFile

logger = get_logger(__name__)


class FileSnapshotFeed(BaseSnapshotFeed):
    """Loads a snapshot captured to a JSON file.

    The file holds either a bare list of vault records or an object with a
    ``vaults`` list and optional ``asOf`` / ``version`` fields. Without
    ``asOf`` the file's modification time is used.
    """

    def __init__(self, config: PricingSettings):
        super().__init__(config)
        self.path: Path = config.snapshot_file_required

    @property
    def feed_name(self) -> str:
        return "file"

    def _load(self) -> PoolSnapshot:
        try:
            raw = json.loads(self.path.read_text())
            modified = self.path.stat().st_mtime
        except (OSError, json.JSONDecodeError) as exc:
            raise SnapshotFeedError(f"Cannot read snapshot file {self.path}: {exc}") from exc

        if isinstance(raw, list):
            raw = {"vaults": raw}
        try:
            document = SnapshotFile.model_validate(raw)
        except ValidationError as exc:
            raise SnapshotFeedError(f"Invalid snapshot file {self.path}: {exc}") from exc

        as_of = document.as_of if document.as_of is not None else modified
        return build_snapshot(
            document.vaults, self.config, as_of=as_of, version=document.version
        )

    async def fetch_snapshot(self) -> PoolSnapshot:
        logger.info("Loading snapshot from %s", self.path)
        return await asyncio.to_thread(self._load)
