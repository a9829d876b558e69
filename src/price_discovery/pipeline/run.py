"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio

from ..cache import PriceCache
from ..state import AppState
from .context import PipelineContext
from .inputs import load_inputs
from .pricing import price_tokens


async def run_pricing(
    state: AppState,
    token_ids: list[str] | None = None,
    cache: PriceCache | None = None,
) -> PipelineContext:
    """Execute the complete pricing pipeline.

    This is a thin orchestrator that sequences the pipeline steps:
    1. Snapshot and anchor loading (with snapshot checks)
    2. Bulk pricing

    Args:
        state: Application state containing settings and logger
        token_ids: Tokens to price; every snapshot token when empty
        cache: Optional result cache shared across runs

    Returns:
        The populated pipeline context
    """
    s = state.settings
    log = state.logger

    log.info(
        "Starting pricing run",
        extra={"tokens": len(token_ids or []), "snapshot_source": s.snapshot_source.value},
    )

    timeout_s = s.global_timeout_seconds
    ctx = PipelineContext(state=state, token_ids=list(token_ids or []), cache=cache)

    async def _run_pipeline() -> None:
        await load_inputs(ctx)
        await price_tokens(ctx)

    try:
        if timeout_s is None or timeout_s <= 0:
            await _run_pipeline()
        else:
            async with asyncio.timeout(timeout_s):
                await _run_pipeline()
    except asyncio.TimeoutError as exc:
        log.error("Pricing pipeline timed out", extra={"timeout_seconds": timeout_s})
        raise asyncio.TimeoutError(
            f"Pricing exceeded global timeout {timeout_s}s\n N.B. This can be changed via "
            "`global_timeout_seconds` or CLI flag `--global-timeout-seconds`."
        ) from exc

    log.info("Pricing run completed")
    return ctx
