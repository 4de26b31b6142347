"""Pydantic models for pool data crossing the I/O edge.

Wire data carries amounts as decimal strings and uses camelCase keys.
These models validate it once and convert to the typed dataclasses the
engine works with; the engine itself never sees untyped data.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from amm_engine.models.types import AssetId, Uint64
from amm_engine.pool import Pool, PoolSnapshot, SharePosition
from amm_engine.quote import Quote


class PoolRecord(BaseModel):
    """Serialized pool state."""

    pool_id: str = Field(alias="poolId", min_length=1)
    asset_a: AssetId = Field(alias="assetA")
    asset_b: AssetId = Field(alias="assetB")
    reserve_a: Uint64 = Field(alias="reserveA")
    reserve_b: Uint64 = Field(alias="reserveB")
    share_supply: Uint64 = Field(alias="shareSupply")
    fee_numerator: int = Field(alias="feeNumerator", ge=0)
    fee_denominator: int = Field(alias="feeDenominator", gt=0)
    cumulative_fee_a: Uint64 = Field(default="0", alias="cumulativeFeeA")
    cumulative_fee_b: Uint64 = Field(default="0", alias="cumulativeFeeB")
    cumulative_volume_a: Uint64 = Field(default="0", alias="cumulativeVolumeA")
    cumulative_volume_b: Uint64 = Field(default="0", alias="cumulativeVolumeB")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_consistency(self) -> PoolRecord:
        if self.asset_a == self.asset_b:
            raise ValueError(f"assetA and assetB must differ, got {self.asset_a}")
        if self.fee_numerator >= self.fee_denominator:
            raise ValueError(
                f"Fee must be below 1, got {self.fee_numerator}/{self.fee_denominator}"
            )
        # Reserves are both zero (drained) or both positive (live)
        live = int(self.share_supply) > 0
        if live and (int(self.reserve_a) == 0 or int(self.reserve_b) == 0):
            raise ValueError("A pool with outstanding shares must hold both assets")
        if not live and (int(self.reserve_a) != 0 or int(self.reserve_b) != 0):
            raise ValueError("A pool without shares cannot hold reserves")
        return self

    @classmethod
    def from_pool(cls, pool: Pool | PoolSnapshot) -> PoolRecord:
        return cls(
            pool_id=pool.pool_id,
            asset_a=pool.asset_a,
            asset_b=pool.asset_b,
            reserve_a=str(pool.reserve_a),
            reserve_b=str(pool.reserve_b),
            share_supply=str(pool.share_supply),
            fee_numerator=pool.fee_numerator,
            fee_denominator=pool.fee_denominator,
            cumulative_fee_a=str(pool.cumulative_fee_a),
            cumulative_fee_b=str(pool.cumulative_fee_b),
            cumulative_volume_a=str(pool.cumulative_volume_a),
            cumulative_volume_b=str(pool.cumulative_volume_b),
        )

    def to_pool(self) -> Pool:
        return Pool(
            pool_id=self.pool_id,
            asset_a=self.asset_a,
            asset_b=self.asset_b,
            reserve_a=int(self.reserve_a),
            reserve_b=int(self.reserve_b),
            share_supply=int(self.share_supply),
            fee_numerator=self.fee_numerator,
            fee_denominator=self.fee_denominator,
            cumulative_fee_a=int(self.cumulative_fee_a),
            cumulative_fee_b=int(self.cumulative_fee_b),
            cumulative_volume_a=int(self.cumulative_volume_a),
            cumulative_volume_b=int(self.cumulative_volume_b),
        )


class SharePositionRecord(BaseModel):
    """Serialized share position."""

    position_id: str = Field(alias="positionId", min_length=1)
    pool_id: str = Field(alias="poolId", min_length=1)
    owner: str = Field(min_length=1)
    share_amount: Uint64 = Field(alias="shareAmount")

    model_config = {"populate_by_name": True}

    @field_validator("share_amount")
    @classmethod
    def _positive_shares(cls, value: str) -> str:
        if int(value) == 0:
            raise ValueError("shareAmount must be positive")
        return value

    @classmethod
    def from_position(cls, position: SharePosition) -> SharePositionRecord:
        return cls(
            position_id=position.position_id,
            pool_id=position.pool_id,
            owner=position.owner,
            share_amount=str(position.share_amount),
        )

    def to_position(self) -> SharePosition:
        return SharePosition(
            position_id=self.position_id,
            pool_id=self.pool_id,
            owner=self.owner,
            share_amount=int(self.share_amount),
        )


class QuoteRecord(BaseModel):
    """Serialized swap preview handed to a caller."""

    direction: str
    amount_in: Uint64 = Field(alias="amountIn")
    amount_out: Uint64 = Field(alias="amountOut")
    fee_amount: Uint64 = Field(alias="feeAmount")
    price_impact_bps: int = Field(alias="priceImpactBps", ge=0, le=10_000)
    minimum_received: Uint64 = Field(alias="minimumReceived")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: Quote) -> QuoteRecord:
        return cls(
            direction=quote.direction.value,
            amount_in=str(quote.amount_in),
            amount_out=str(quote.amount_out),
            fee_amount=str(quote.fee_amount),
            price_impact_bps=quote.price_impact_bps,
            minimum_received=str(quote.minimum_received),
        )


__all__ = ["PoolRecord", "SharePositionRecord", "QuoteRecord"]
