"""Swap execution against a live pool.

The quote is always re-derived from the pool's current reserves; a quote
the caller obtained earlier only informs min_amount_out.
"""

from __future__ import annotations

from dataclasses import dataclass

from amm_engine.errors import InsufficientOutputAmount, InvariantViolation, SlippageExceeded
from amm_engine.pool import Direction, Pool, stored_amount
from amm_engine.quote import quote_swap
from amm_engine.safe_int import S


@dataclass(frozen=True)
class SwapReceipt:
    """Result of a committed swap."""

    pool_id: str
    direction: Direction
    amount_in: int
    amount_out: int
    fee_amount: int


def execute_swap(
    pool: Pool,
    direction: Direction | str,
    amount_in: int,
    min_amount_out: int = 0,
) -> SwapReceipt:
    """Swap an exact input through the pool.

    Args:
        pool: Pool to mutate (caller holds the pool's write lock)
        direction: Swap direction, as the enum or its wire value ("a_to_b")
        amount_in: Gross input amount, fee included
        min_amount_out: Smallest acceptable output

    Returns:
        SwapReceipt with the committed amounts

    Raises:
        ZeroAmount: If amount_in is not positive
        InsufficientReserves: If the pool is empty on either side
        InsufficientOutputAmount: If the output rounds to zero
        SlippageExceeded: If the output is below min_amount_out
        ReserveOverflow: If the input reserve would exceed uint64
    """
    direction = Direction(direction)
    reserve_in, reserve_out = pool.get_reserves(direction)
    amount_out, fee_amount = quote_swap(
        reserve_in, reserve_out, amount_in, pool.fee_numerator, pool.fee_denominator
    )

    if amount_out == 0:
        raise InsufficientOutputAmount(
            f"Input {amount_in} is too small to produce any output",
            pool_id=pool.pool_id,
            amount_in=amount_in,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )
    if amount_out < min_amount_out:
        raise SlippageExceeded(
            f"Swap output {amount_out} below minimum {min_amount_out}",
            pool_id=pool.pool_id,
            amount_out=amount_out,
            min_amount_out=min_amount_out,
        )

    new_reserve_in = stored_amount(S(reserve_in) + amount_in, "reserve_in")
    new_reserve_out = (S(reserve_out) - amount_out).value
    if new_reserve_in * new_reserve_out < reserve_in * reserve_out:
        raise InvariantViolation(
            "Swap would decrease reserve product",
            pool_id=pool.pool_id,
            k_before=reserve_in * reserve_out,
            k_after=new_reserve_in * new_reserve_out,
        )

    if direction is Direction.A_TO_B:
        pool.reserve_a, pool.reserve_b = new_reserve_in, new_reserve_out
        pool.cumulative_fee_a += fee_amount
        pool.cumulative_volume_a += amount_in
    else:
        pool.reserve_b, pool.reserve_a = new_reserve_in, new_reserve_out
        pool.cumulative_fee_b += fee_amount
        pool.cumulative_volume_b += amount_in

    return SwapReceipt(
        pool_id=pool.pool_id,
        direction=direction,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=fee_amount,
    )


__all__ = ["SwapReceipt", "execute_swap"]
