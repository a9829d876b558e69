from __future__ import annotations

from .engine import PriceDiscoveryEngine, dedupe_estimates
from .liquidity import LiquidityBook, discover_reference_prices, value_pool_liquidity
from .outlier_filter import FilterOutcome, OutlierFilter
from .path_finder import PathFinder, find_paths
from .path_weighter import PathWeighter
from .pool_graph import GraphStats, MalformedPoolError, PoolGraph
from .price_aggregator import PriceAggregator
from .rate_calculator import RateCalculator

__all__ = [
    "PriceDiscoveryEngine",
    "dedupe_estimates",
    "LiquidityBook",
    "discover_reference_prices",
    "value_pool_liquidity",
    "FilterOutcome",
    "OutlierFilter",
    "PathFinder",
    "find_paths",
    "PathWeighter",
    "GraphStats",
    "MalformedPoolError",
    "PoolGraph",
    "PriceAggregator",
    "RateCalculator",
]
