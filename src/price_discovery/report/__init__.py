from __future__ import annotations

from .encoder import encode_price_report, encode_price_result
from .formatter import build_price_table, format_price_table

__all__ = [
    "encode_price_report",
    "encode_price_result",
    "build_price_table",
    "format_price_table",
]
