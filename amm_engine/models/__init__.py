"""Pydantic models for pool data at the I/O edge."""

from amm_engine.models.records import PoolRecord, QuoteRecord, SharePositionRecord
from amm_engine.models.types import AssetId, Uint64, normalize_asset_id

__all__ = [
    # Types
    "AssetId",
    "Uint64",
    "normalize_asset_id",
    # Records
    "PoolRecord",
    "SharePositionRecord",
    "QuoteRecord",
]
