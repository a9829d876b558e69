from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from ...constants import POOL_VAULT_TYPE, VAULT_FEE_DENOMINATOR
from ...domain import Pool, PoolSnapshot, Token
from ...logger import get_logger
from ...settings import PricingSettings
from .models import TokenRecord, VaultRecord

logger = get_logger(__name__)


class SnapshotFeedError(Exception):
    """Raised when a snapshot cannot be obtained at all."""


def snapshot_version(records: list[dict[str, Any]]) -> str:
    """Content hash of the raw records, stable across key ordering."""
    payload = json.dumps(records, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode()).hexdigest()[:16]


class _TokenRegistry:
    def __init__(self, settings: PricingSettings):
        self._anchor_id = settings.anchor_token_id
        self._stable_symbols = {symbol.upper() for symbol in settings.stablecoin_symbols}
        self._stable_ids = set(settings.stablecoin_token_ids)
        self.tokens: dict[str, Token] = {}

    def _is_stablecoin(self, record: TokenRecord) -> bool:
        if record.contract_id == self._anchor_id:
            return False
        if record.is_stablecoin is not None:
            return record.is_stablecoin
        return (
            record.contract_id in self._stable_ids
            or record.symbol.upper() in self._stable_symbols
        )

    def resolve(self, record: TokenRecord) -> Token:
        """Return the registered token, registering it on first sight.

        Raises:
            ValueError: If the record disagrees with an earlier one on decimals
        """
        existing = self.tokens.get(record.contract_id)
        if existing is not None:
            if existing.decimals != record.decimals:
                raise ValueError(
                    f"token {record.contract_id} reported with {record.decimals} decimals, "
                    f"previously {existing.decimals}"
                )
            return existing

        token = Token(
            id=record.contract_id,
            decimals=record.decimals,
            symbol=record.symbol,
            is_stablecoin=self._is_stablecoin(record),
            is_anchor=record.contract_id == self._anchor_id,
        )
        self.tokens[token.id] = token
        return token


def build_snapshot(
    records: Iterable[dict[str, Any]],
    settings: PricingSettings,
    *,
    as_of: float,
    version: str | None = None,
) -> PoolSnapshot:
    """Validate raw vault records and assemble a PoolSnapshot.

    Args:
        records: Raw vault dicts as served by the DEX cache
        settings: Supplies the anchor id and the stablecoin registry
        as_of: Capture time in unix seconds, also used for undated pools
        version: Snapshot version; a content hash when omitted

    Returns:
        PoolSnapshot. Records that fail validation are skipped with a
        warning and counted in ``skipped_records``; non-pool vaults are
        ignored silently.
    """
    raw = list(records)
    registry = _TokenRegistry(settings)
    pools: list[Pool] = []
    skipped = 0

    for index, item in enumerate(raw):
        if item.get("type", POOL_VAULT_TYPE) != POOL_VAULT_TYPE:
            continue
        try:
            record = VaultRecord.model_validate(item)
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed vault record #%d: %d validation error(s)",
                index,
                exc.error_count(),
            )
            skipped += 1
            continue

        try:
            token_a = registry.resolve(record.token_a)
            token_b = registry.resolve(record.token_b)
        except ValueError as exc:
            logger.warning("Skipping vault %s: %s", record.contract_id, exc)
            skipped += 1
            continue

        last_updated = (
            record.reserves_last_updated_at / 1000
            if record.reserves_last_updated_at is not None
            else as_of
        )
        pools.append(
            Pool(
                id=record.contract_id,
                token_a=token_a,
                token_b=token_b,
                reserve_a=record.reserves_a,
                reserve_b=record.reserves_b,
                fee_rate=record.fee / VAULT_FEE_DENOMINATOR,
                last_updated=last_updated,
            )
        )

    snapshot = PoolSnapshot(
        tokens=registry.tokens,
        pools=tuple(pools),
        as_of=as_of,
        version=version or snapshot_version(raw),
        skipped_records=skipped,
    )
    logger.info(
        "Loaded snapshot %s: %d pools, %d tokens, %d records skipped",
        snapshot.version,
        len(snapshot.pools),
        len(snapshot.tokens),
        skipped,
    )
    return snapshot


class BaseSnapshotFeed(ABC):
    """Abstract base class for pool snapshot feeds."""

    def __init__(self, config: PricingSettings):
        self.config = config

    @property
    @abstractmethod
    def feed_name(self) -> str:
        """Return the name of this feed."""
        ...

    @abstractmethod
    async def fetch_snapshot(self) -> PoolSnapshot:
        """Fetch the current pool snapshot.

        Raises:
            SnapshotFeedError: If the source is unreachable or unreadable
        """
        ...
