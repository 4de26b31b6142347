"""Pool record, snapshots, and share positions.

A pool holds reserves of two assets and prices trades with the constant
product formula: reserve_a * reserve_b = k, with the fee retained in the pool.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

from amm_engine.errors import InvalidFee, InvalidPool, ReserveOverflow
from amm_engine.safe_int import S, SafeInt


def stored_amount(value: SafeInt | int, field: str) -> int:
    """Unwrap a value that is about to be written to a pool field.

    Raises:
        ReserveOverflow: If the value does not fit in uint64
    """
    wrapped = S(value)
    if not wrapped.is_uint64():
        raise ReserveOverflow(f"{field} out of uint64 range: {wrapped}", field=field, value=wrapped.value)
    return wrapped.value


class Direction(str, Enum):
    """Which reserve plays reserve_in for a swap."""

    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"

    @property
    def reversed(self) -> Direction:
        return Direction.B_TO_A if self is Direction.A_TO_B else Direction.A_TO_B


def validate_fee(fee_numerator: int, fee_denominator: int) -> None:
    """Check a fee fraction lies in [0, 1).

    Raises:
        InvalidFee: If the denominator is not positive or the numerator is
            outside [0, denominator)
    """
    if fee_denominator <= 0:
        raise InvalidFee(
            f"Fee denominator must be positive, got {fee_denominator}",
            fee_numerator=fee_numerator,
            fee_denominator=fee_denominator,
        )
    if not 0 <= fee_numerator < fee_denominator:
        raise InvalidFee(
            f"Fee must be in [0, 1), got {fee_numerator}/{fee_denominator}",
            fee_numerator=fee_numerator,
            fee_denominator=fee_denominator,
        )


class _PoolView:
    """Read-only accessors shared by Pool and PoolSnapshot."""

    pool_id: str
    asset_a: str
    asset_b: str
    reserve_a: int
    reserve_b: int
    share_supply: int
    fee_numerator: int
    fee_denominator: int

    def __post_init__(self) -> None:
        if self.asset_a == self.asset_b:
            raise InvalidPool(
                f"Pool assets must differ, got {self.asset_a} twice",
                asset=self.asset_a,
            )
        validate_fee(self.fee_numerator, self.fee_denominator)

    @property
    def k(self) -> int:
        """Constant-product invariant reserve_a * reserve_b."""
        return self.reserve_a * self.reserve_b

    @property
    def is_empty(self) -> bool:
        """True once every share has been redeemed."""
        return self.share_supply == 0

    def get_reserves(self, direction: Direction | str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if Direction(direction) is Direction.A_TO_B:
            return self.reserve_a, self.reserve_b
        return self.reserve_b, self.reserve_a

    def direction_for(self, asset_in: str) -> Direction:
        """Direction of a swap that sells asset_in into this pool."""
        if asset_in == self.asset_a:
            return Direction.A_TO_B
        if asset_in == self.asset_b:
            return Direction.B_TO_A
        raise InvalidPool(f"Asset {asset_in} not in pool", pool_id=self.pool_id, asset=asset_in)

    def asset_out(self, direction: Direction | str) -> str:
        return self.asset_b if Direction(direction) is Direction.A_TO_B else self.asset_a


@dataclass
class Pool(_PoolView):
    """The persistent state of one liquidity pool.

    Identity is the unordered asset pair plus pool_id; which asset is "a"
    only fixes the field layout, direction is chosen per swap.

    Attributes:
        pool_id: Engine-assigned identifier
        asset_a: Identifier of the first asset
        asset_b: Identifier of the second asset
        reserve_a: Amount of asset_a held (smallest units)
        reserve_b: Amount of asset_b held (smallest units)
        share_supply: Total shares outstanding
        fee_numerator: Fee fraction numerator, fixed at creation
        fee_denominator: Fee fraction denominator, fixed at creation
        cumulative_fee_a: Fees collected in asset_a (informational)
        cumulative_fee_b: Fees collected in asset_b (informational)
        cumulative_volume_a: Gross asset_a swapped in (informational)
        cumulative_volume_b: Gross asset_b swapped in (informational)
    """

    pool_id: str
    asset_a: str
    asset_b: str
    reserve_a: int
    reserve_b: int
    share_supply: int
    fee_numerator: int
    fee_denominator: int
    cumulative_fee_a: int = 0
    cumulative_fee_b: int = 0
    cumulative_volume_a: int = 0
    cumulative_volume_b: int = 0

    def snapshot(self) -> PoolSnapshot:
        """Frozen copy of the current state for read-only use."""
        return PoolSnapshot(**asdict(self))


@dataclass(frozen=True)
class PoolSnapshot(_PoolView):
    """Immutable view of a Pool, safe to share with concurrent readers.

    Quotes are computed against snapshots; a snapshot is valid until the
    next mutation of the pool it was taken from.
    """

    pool_id: str
    asset_a: str
    asset_b: str
    reserve_a: int
    reserve_b: int
    share_supply: int
    fee_numerator: int
    fee_denominator: int
    cumulative_fee_a: int = 0
    cumulative_fee_b: int = 0
    cumulative_volume_a: int = 0
    cumulative_volume_b: int = 0


@dataclass(frozen=True)
class SharePosition:
    """A holder's claim on a proportional slice of a pool.

    Positions are never edited in place: a partial withdrawal replaces the
    position with a smaller one under the same position_id.
    """

    position_id: str
    pool_id: str
    owner: str
    share_amount: int

    def __post_init__(self) -> None:
        if self.share_amount <= 0:
            raise ValueError(f"share_amount must be positive, got {self.share_amount}")
