"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    DEFAULT_COINGECKO_URL,
    DEFAULT_DEX_CACHE_URL,
    KNOWN_STABLECOINS,
    SBTC_CONTRACT_ID,
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
)

load_dotenv()


class SnapshotSource(str, Enum):
    DEX_CACHE = "dex-cache"
    FILE = "file"


class AnchorOracleSource(str, Enum):
    DEX_CACHE = "dex-cache"
    COINGECKO = "coingecko"
    STATIC = "static"


class WeightingSettings(BaseModel):
    """Tunable constants of the per-path weight formula."""

    weight_floor: float = Field(default=0.01, gt=0, le=1)
    hop_penalty: float = Field(default=0.9, gt=0, le=1)
    liquidity_boost_scale_usd: float = Field(default=1_000_000.0, gt=0)
    liquidity_boost_cap: float = Field(default=2.0, ge=1.0)
    recency_half_life_seconds: float = Field(default=SECONDS_PER_HOUR, gt=0)
    recency_floor: float = Field(default=0.5, gt=0, le=1)

    model_config = ConfigDict(extra="ignore")


class ConfidenceSettings(BaseModel):
    """Tunable constants of the aggregate confidence score."""

    consistency_weight: float = Field(default=0.4, ge=0)
    liquidity_weight: float = Field(default=0.4, ge=0)
    path_count_weight: float = Field(default=0.2, ge=0)
    liquidity_scale_usd: float = Field(default=1_000_000.0, gt=0)
    target_path_count: int = Field(default=3, ge=1)
    path_liquidity_scale_usd: float = Field(default=50_000.0, gt=0)
    stale_after_seconds: float = Field(default=SECONDS_PER_DAY, gt=0)
    stale_penalty: float = Field(default=0.25, ge=0, le=1)

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def validate_component_weights(self) -> "ConfidenceSettings":
        total = self.consistency_weight + self.liquidity_weight + self.path_count_weight
        if abs(total - 1.0) > 1e-9:
            raise ValueError(
                f"confidence component weights must sum to 1.0 (got {total})"
            )
        return self


class PricingSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with PRICE_DISCOVERY_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- anchor / registry ---
    anchor_token_id: str = SBTC_CONTRACT_ID
    stablecoin_symbols: list[str] = Field(
        default_factory=lambda: sorted(KNOWN_STABLECOINS)
    )
    stablecoin_token_ids: list[str] = Field(default_factory=list)

    # --- feeds ---
    snapshot_source: SnapshotSource = SnapshotSource.DEX_CACHE
    snapshot_file: Path | None = None
    dex_cache_url: str = DEFAULT_DEX_CACHE_URL
    anchor_oracle: AnchorOracleSource = AnchorOracleSource.DEX_CACHE
    static_anchor_price: float | None = Field(default=None, gt=0)
    static_anchor_confidence: float = Field(default=1.0, ge=0, le=1)
    coingecko_url: str = DEFAULT_COINGECKO_URL
    coingecko_api_key: SecretStr | None = None
    http_timeout: float = Field(default=10.0, gt=0)
    http_retries: int = Field(default=3, ge=0)

    # --- path discovery ---
    max_hops: int = Field(default=4, ge=1, le=8)
    include_fees: bool = False
    outlier_max_deviation: float = Field(
        default=0.5,
        gt=0,
        description="Maximum relative deviation from the median path rate before a path is discarded.",
    )
    min_surviving_paths: int = Field(default=1, ge=1)
    discovery_max_cycles: int = Field(default=10, ge=1)

    weighting: WeightingSettings = Field(default_factory=WeightingSettings)
    confidence: ConfidenceSettings = Field(default_factory=ConfidenceSettings)

    # --- execution ---
    max_concurrency: int = Field(default=10, ge=1)
    cache_ttl_seconds: float = Field(default=300.0, ge=0)
    global_timeout_seconds: float | None = 120.0

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PRICE_DISCOVERY_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("coingecko_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        return str(v).upper()

    @model_validator(mode="after")
    def validate_feed_requirements(self) -> "PricingSettings":
        """Make sure the selected feeds have what they need."""
        if self.snapshot_source is SnapshotSource.FILE and self.snapshot_file is None:
            raise ValueError("snapshot_file is required when snapshot_source is 'file'")
        if (
            self.anchor_oracle is AnchorOracleSource.STATIC
            and self.static_anchor_price is None
        ):
            raise ValueError(
                "static_anchor_price is required when anchor_oracle is 'static'"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("PRICE_DISCOVERY_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("price-discovery.toml")
                    user_config = (
                        Path.home() / ".config" / "price-discovery" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [price_discovery]
                body = data.get("price_discovery", data)
                if not isinstance(body, dict):
                    return {}

                if "coingecko_api_key" in body:
                    raise ValueError(
                        "Security violation: 'coingecko_api_key' found in TOML config file. "
                        "Secrets must only be provided via environment variables or CLI flags."
                    )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-friendly dict with secrets redacted."""
        data = self.model_dump(mode="json")
        if self.coingecko_api_key:
            data["coingecko_api_key"] = "***redacted***"
        return data

    @property
    def snapshot_file_required(self) -> Path:
        """Get snapshot_file, raising ValueError if not set."""
        if self.snapshot_file is None:
            raise ValueError("snapshot_file must be configured")
        return self.snapshot_file

    @property
    def static_anchor_price_required(self) -> float:
        """Get static_anchor_price, raising ValueError if not set."""
        if self.static_anchor_price is None:
            raise ValueError("static_anchor_price must be configured")
        return self.static_anchor_price
