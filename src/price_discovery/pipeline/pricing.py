"""Bulk token pricing."""

from __future__ import annotations

import asyncio

from ..domain import PriceResult
from .context import PipelineContext


async def price_tokens(
    ctx: PipelineContext, token_ids: list[str] | None = None
) -> dict[str, PriceResult]:
    """Price many tokens against the loaded engine.

    Args:
        ctx: Pipeline context with a built engine
        token_ids: Tokens to price; defaults to ``ctx.token_ids`` and, when
            that is empty too, to every token in the snapshot

    Returns:
        Results keyed by token id, also stored in ``ctx.results``. A token
        whose pricing raised is recorded in ``ctx.errors`` instead and does
        not affect the others.
    """
    s = ctx.state.settings
    log = ctx.state.logger
    engine = ctx.engine_required

    requested = token_ids or ctx.token_ids or sorted(ctx.snapshot_required.tokens)
    unique_ids = list(dict.fromkeys(requested))
    semaphore = asyncio.Semaphore(s.max_concurrency)

    log.info(
        "Pricing %d tokens (max concurrency: %d)...", len(unique_ids), s.max_concurrency
    )

    async def _price_one(token_id: str) -> None:
        if ctx.cache is not None:
            cached = ctx.cache.get(engine.version, token_id)
            if cached is not None:
                log.debug("Cache hit for %s", token_id)
                ctx.results[token_id] = cached
                return

        async with semaphore:
            try:
                result = await asyncio.to_thread(engine.price, token_id)
            except Exception as exc:
                log.error("Pricing %s failed: %s", token_id, exc, exc_info=True)
                ctx.errors[token_id] = str(exc)
                return

        ctx.results[token_id] = result
        if ctx.cache is not None:
            ctx.cache.set(engine.version, token_id, result)

    await asyncio.gather(*(_price_one(token_id) for token_id in unique_ids))

    results = {
        token_id: ctx.results[token_id]
        for token_id in unique_ids
        if token_id in ctx.results
    }
    priced = sum(1 for result in results.values() if result.priced)
    log.info(
        "Priced %d of %d tokens (%d without price, %d errors)",
        priced,
        len(unique_ids),
        len(results) - priced,
        len(ctx.errors),
    )
    return results
