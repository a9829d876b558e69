"""CLI entrypoint for price discovery."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any

import typer

from .logger import setup_logging
from .settings import AnchorOracleSource, PricingSettings, SnapshotSource
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Price DEX tokens in USD through liquidity paths to sBTC.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("price_discovery")


@app.command()
def prices(
    token_ids: Annotated[
        list[str] | None,
        typer.Argument(help="Token contract ids to price. Prices every token when omitted."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [price_discovery] table).",
        ),
    ] = None,
    snapshot_source: Annotated[
        SnapshotSource | None,
        typer.Option("--source", "-s", help="Where to read pool reserves from."),
    ] = None,
    snapshot_file: Annotated[
        Path | None,
        typer.Option(
            "--snapshot-file",
            help="JSON snapshot to price; implies --source file.",
        ),
    ] = None,
    anchor_oracle: Annotated[
        AnchorOracleSource | None,
        typer.Option("--oracle", help="Where to read the BTC/USD anchor price from."),
    ] = None,
    anchor_price: Annotated[
        float | None,
        typer.Option(
            "--anchor-price",
            help="Fixed BTC/USD price; implies --oracle static.",
        ),
    ] = None,
    max_hops: Annotated[
        int | None,
        typer.Option("--max-hops", help="Maximum pools per path."),
    ] = None,
    include_fees: Annotated[
        bool | None,
        typer.Option(
            "--include-fees/--exclude-fees",
            help="Discount each hop by its pool fee.",
        ),
    ] = None,
    global_timeout_seconds: Annotated[
        float | None,
        typer.Option(
            "--global-timeout-seconds",
            help="Abort the run after this many seconds (0 disables).",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print results as JSON instead of a table."),
    ] = False,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Discover USD prices for DEX tokens.

    Loads configuration, fetches a pool snapshot and the anchor price,
    prices the requested tokens and prints a table or JSON.
    """
    if config_path:
        os.environ["PRICE_DISCOVERY_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Any] = {}
    if snapshot_file is not None:
        init_kwargs["snapshot_file"] = snapshot_file
        init_kwargs["snapshot_source"] = SnapshotSource.FILE
    if snapshot_source is not None:
        init_kwargs["snapshot_source"] = snapshot_source
    if anchor_price is not None:
        init_kwargs["static_anchor_price"] = anchor_price
        init_kwargs["anchor_oracle"] = AnchorOracleSource.STATIC
    if anchor_oracle is not None:
        init_kwargs["anchor_oracle"] = anchor_oracle
    if max_hops is not None:
        init_kwargs["max_hops"] = max_hops
    if include_fees is not None:
        init_kwargs["include_fees"] = include_fees
    if global_timeout_seconds is not None:
        init_kwargs["global_timeout_seconds"] = global_timeout_seconds
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = PricingSettings(**init_kwargs)

    setup_logging(settings.log_level)
    logger = _build_logger()
    state = AppState(settings=settings, logger=logger)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    from .pipeline.run import run_pricing
    from .report import encode_price_report, format_price_table

    ctx = asyncio.run(run_pricing(state, token_ids or []))

    if as_json:
        payload = encode_price_report(
            ctx.results,
            snapshot_version=ctx.snapshot_required.version,
            anchor_quote=ctx.anchor_quote_required,
            errors=ctx.errors,
        )
        typer.echo(json.dumps(payload, indent=2))
    else:
        format_price_table(
            ctx.results, ctx.snapshot_required.tokens, ctx.anchor_quote_required
        )

    if ctx.errors:
        raise typer.Exit(code=1)


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
