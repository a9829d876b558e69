"""Boundary models for vault records served by the DEX cache."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ...constants import POOL_VAULT_TYPE


class TokenRecord(BaseModel):
    contract_id: str = Field(alias="contractId", min_length=1)
    symbol: str = ""
    decimals: int = Field(ge=0, le=38)
    is_stablecoin: bool | None = Field(default=None, alias="isStablecoin")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class VaultRecord(BaseModel):
    """One vault entry. Only ``type == POOL`` vaults become pools."""

    contract_id: str = Field(alias="contractId", min_length=1)
    type: str = POOL_VAULT_TYPE
    protocol: str | None = None
    fee: float = Field(default=0.0, ge=0)  # parts per million
    token_a: TokenRecord = Field(alias="tokenA")
    token_b: TokenRecord = Field(alias="tokenB")
    reserves_a: int = Field(alias="reservesA")
    reserves_b: int = Field(alias="reservesB")
    reserves_last_updated_at: float | None = Field(
        default=None, alias="reservesLastUpdatedAt"
    )  # unix milliseconds

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SnapshotFile(BaseModel):
    """On-disk snapshot: vault records plus optional capture metadata."""

    vaults: list[dict]
    as_of: float | None = Field(default=None, alias="asOf")  # unix seconds
    version: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
