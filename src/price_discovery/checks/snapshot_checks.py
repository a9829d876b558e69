from __future__ import annotations

from dataclasses import dataclass

from ..domain import PoolSnapshot
from ..logger import get_logger
from ..settings import PricingSettings

logger = get_logger(__name__)


@dataclass
class CheckResult:
    """Result from a snapshot check."""

    name: str
    passed: bool
    message: str
    retry_recommended: bool = False


class SnapshotCheckError(Exception):
    """Raised when a snapshot is unusable and pricing should stop."""

    def __init__(self, message: str, retry_recommended: bool = False):
        super().__init__(message)
        self.retry_recommended = retry_recommended


def check_anchor_present(settings: PricingSettings, snapshot: PoolSnapshot) -> CheckResult:
    anchor_id = settings.anchor_token_id
    paired = sum(
        1 for pool in snapshot.pools if anchor_id in (pool.token_a.id, pool.token_b.id)
    )
    if anchor_id not in snapshot.tokens or paired == 0:
        return CheckResult(
            "anchor_present",
            False,
            f"Anchor {anchor_id} has no pools; only stablecoins can be priced",
        )
    return CheckResult("anchor_present", True, f"Anchor paired in {paired} pool(s)")


def check_usable_pools(settings: PricingSettings, snapshot: PoolSnapshot) -> CheckResult:
    usable = sum(1 for pool in snapshot.pools if pool.reserve_a > 0 and pool.reserve_b > 0)
    if usable == 0:
        return CheckResult(
            "usable_pools",
            False,
            f"None of {len(snapshot.pools)} pools has reserves on both sides",
            retry_recommended=True,
        )
    return CheckResult(
        "usable_pools", True, f"{usable} of {len(snapshot.pools)} pools have reserves"
    )


def check_freshness(settings: PricingSettings, snapshot: PoolSnapshot) -> CheckResult:
    newest = max(pool.last_updated for pool in snapshot.pools)
    age = snapshot.as_of - newest
    limit = settings.confidence.stale_after_seconds
    if age > limit:
        return CheckResult(
            "freshness",
            False,
            f"Newest reserves are {age:.0f}s old (limit {limit:.0f}s); prices will be marked stale",
            retry_recommended=True,
        )
    return CheckResult("freshness", True, f"Newest reserves are {max(0.0, age):.0f}s old")


SNAPSHOT_CHECKS = [check_anchor_present, check_usable_pools, check_freshness]


def run_snapshot_checks(
    settings: PricingSettings, snapshot: PoolSnapshot
) -> list[CheckResult]:
    """Run sanity checks on a freshly loaded snapshot.

    Args:
        settings: Pricing settings
        snapshot: Snapshot about to be priced

    Returns:
        One CheckResult per check. Failed checks are logged as warnings but
        do not stop pricing; the engine degrades to no-price or
        low-confidence results instead.

    Raises:
        SnapshotCheckError: If the snapshot holds no pools at all
    """
    if not snapshot.pools:
        raise SnapshotCheckError(
            f"Snapshot {snapshot.version} contains no pools "
            f"({snapshot.skipped_records} records skipped)",
            retry_recommended=True,
        )

    results = [check(settings, snapshot) for check in SNAPSHOT_CHECKS]
    for result in results:
        if result.passed:
            logger.info("✓ %s: %s", result.name, result.message)
        else:
            logger.warning("✗ %s: %s", result.name, result.message)
    return results
