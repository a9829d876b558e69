"""Snapshot and anchor loading."""

from __future__ import annotations

import asyncio

from ..adapters import get_anchor_oracle, get_snapshot_feed
from ..checks import run_snapshot_checks
from ..processors import PriceDiscoveryEngine
from .context import PipelineContext


async def load_inputs(ctx: PipelineContext) -> None:
    """Fetch the pool snapshot and anchor quote, check them, build the engine.

    Args:
        ctx: Pipeline context containing state

    Sets the snapshot, anchor quote, check results and engine in the context.

    Raises:
        SnapshotFeedError: If the snapshot feed is unavailable
        AnchorOracleError: If the anchor oracle is unavailable
        SnapshotCheckError: If the snapshot contains no pools
    """
    s = ctx.state.settings
    log = ctx.state.logger

    feed = get_snapshot_feed(s)
    oracle = get_anchor_oracle(s)
    log.info("Loading inputs (feed: %s, oracle: %s)...", feed.feed_name, oracle.oracle_name)

    snapshot, anchor_quote = await asyncio.gather(
        feed.fetch_snapshot(), oracle.fetch_quote()
    )

    ctx.check_results = run_snapshot_checks(s, snapshot)
    ctx.snapshot = snapshot
    ctx.anchor_quote = anchor_quote
    ctx.engine = await asyncio.to_thread(
        PriceDiscoveryEngine, snapshot, anchor_quote, s
    )
    stats = ctx.engine.stats()
    log.info(
        "Engine ready for snapshot %s: %d tokens, %d pools, %d anchor pairs",
        snapshot.version,
        stats.total_tokens,
        stats.total_pools,
        stats.anchor_pair_count,
    )
