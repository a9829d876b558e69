"""Rich console formatter for pricing runs."""

from __future__ import annotations

from collections.abc import Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..domain import AnchorQuote, PriceResult, PriceSource, Token

SOURCE_STYLES = {
    PriceSource.ORACLE: "magenta",
    PriceSource.STABLECOIN: "cyan",
    PriceSource.MARKET: "green",
    PriceSource.NONE: "dim",
}


def _format_usd(value: float | None) -> str:
    """Format a USD price, keeping significant digits for tiny values."""
    if value is None:
        return "-"
    if value >= 1:
        return f"${value:,.4f}"
    return f"${value:.6g}"


def _confidence_style(confidence: float) -> str:
    if confidence >= 0.7:
        return "green"
    if confidence >= 0.4:
        return "yellow"
    return "red"


def _label(token_id: str, tokens: Mapping[str, Token]) -> str:
    token = tokens.get(token_id)
    return token.label if token else f"{token_id[:10]}...{token_id[-6:]}"


def build_price_table(
    results: Mapping[str, PriceResult], tokens: Mapping[str, Token]
) -> Table:
    table = Table(title="Token Prices", header_style="bold", expand=False)
    table.add_column("Token")
    table.add_column("USD Price", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Source")
    table.add_column("Paths", justify="right")
    table.add_column("Primary Path", overflow="fold")

    ordered = sorted(
        results.values(),
        key=lambda r: (not r.priced, -(r.usd_price or 0.0), r.token_id),
    )
    for result in ordered:
        details = result.calculation_details
        if result.priced:
            confidence = f"[{_confidence_style(result.confidence)}]{result.confidence:.3f}[/]"
        else:
            confidence = f"[dim]{result.reason.value if result.reason else '-'}[/]"
        primary = (
            result.primary_path.estimate.path.describe() if result.primary_path else ""
        )
        if details.stale:
            primary = f"{primary} [yellow](stale)[/]"
        table.add_row(
            _label(result.token_id, tokens),
            _format_usd(result.usd_price),
            confidence,
            f"[{SOURCE_STYLES[result.source]}]{result.source.value}[/]",
            f"{details.paths_used}/{details.paths_used + details.paths_discarded}",
            primary,
        )
    return table


def format_price_table(
    results: Mapping[str, PriceResult],
    tokens: Mapping[str, Token],
    anchor_quote: AnchorQuote,
    console: Console | None = None,
) -> None:
    """Print the anchor quote and a price table to stdout.

    Args:
        results: Price results keyed by token id
        tokens: Token registry, used for display symbols
        anchor_quote: Quote the run was priced against
        console: Optional console, mainly for capturing output in tests
    """
    console = console or Console()
    console.print(
        Panel(
            f"[bold]${anchor_quote.price:,.2f}[/] from {anchor_quote.source} "
            f"(confidence {anchor_quote.confidence:.2f})",
            title="[bold]Anchor[/]",
            border_style="blue",
            expand=False,
        )
    )
    console.print(build_price_table(results, tokens))
