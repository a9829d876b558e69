"""JSON encoding of price results for HTTP layers and the CLI."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..domain import AnchorQuote, CalculationDetails, PriceResult, WeightedEstimate


def encode_path(weighted: WeightedEstimate) -> dict[str, Any]:
    estimate = weighted.estimate
    return {
        "tokens": [token.id for token in estimate.path.tokens],
        "pools": [pool.id for pool in estimate.path.pools],
        "hops": estimate.hop_count,
        "impliedRate": estimate.implied_rate,
        "weight": weighted.weight,
        "totalLiquidity": estimate.total_liquidity,
        "reliability": estimate.reliability,
        "confidence": estimate.confidence,
        "ageSeconds": estimate.age_seconds,
        "pinnedAt": estimate.pinned_at.id if estimate.pinned_at else None,
    }


def encode_details(details: CalculationDetails) -> dict[str, Any]:
    return {
        "anchorPrice": details.anchor_price,
        "pathsUsed": details.paths_used,
        "pathsDiscarded": details.paths_discarded,
        "totalLiquidity": details.total_liquidity,
        "priceVariation": details.price_variation,
        "stale": details.stale,
    }


def encode_price_result(result: PriceResult) -> dict[str, Any]:
    """Encode a PriceResult as a camelCase JSON-ready dict.

    Unpriced results keep every key, with ``usdPrice`` set to None and
    ``reason`` explaining why.
    """
    return {
        "tokenId": result.token_id,
        "usdPrice": result.usd_price,
        "anchorRatio": result.anchor_ratio,
        "confidence": result.confidence,
        "source": result.source.value,
        "reason": result.reason.value if result.reason else None,
        "isLpToken": result.is_lp_token,
        "primaryPath": encode_path(result.primary_path) if result.primary_path else None,
        "alternativePaths": [encode_path(path) for path in result.alternative_paths],
        "calculationDetails": encode_details(result.calculation_details),
    }


def encode_price_report(
    results: Mapping[str, PriceResult],
    *,
    snapshot_version: str,
    anchor_quote: AnchorQuote,
    errors: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Encode a whole pricing run."""
    return {
        "snapshotVersion": snapshot_version,
        "anchor": {
            "price": anchor_quote.price,
            "source": anchor_quote.source,
            "confidence": anchor_quote.confidence,
            "timestamp": anchor_quote.timestamp,
        },
        "prices": {token_id: encode_price_result(result) for token_id, result in results.items()},
        "errors": dict(errors or {}),
    }
