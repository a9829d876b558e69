from __future__ import annotations

from ...settings import AnchorOracleSource
from .base import AnchorOracleError, BaseAnchorOracle
from .coingecko import CoinGeckoAnchorOracle
from .dex_cache import DexCacheAnchorOracle
from .static import StaticAnchorOracle

ANCHOR_ORACLES: dict[AnchorOracleSource, type[BaseAnchorOracle]] = {
    AnchorOracleSource.DEX_CACHE: DexCacheAnchorOracle,
    AnchorOracleSource.COINGECKO: CoinGeckoAnchorOracle,
    AnchorOracleSource.STATIC: StaticAnchorOracle,
}

__all__ = [
    "ANCHOR_ORACLES",
    "AnchorOracleError",
    "BaseAnchorOracle",
    "CoinGeckoAnchorOracle",
    "DexCacheAnchorOracle",
    "StaticAnchorOracle",
]
