"""Constant-product swap quoting.

All functions here are pure: no hidden state, no side effects, safe to
call concurrently and unboundedly for previews.

Formula (fee taken from the input):
    fee_amount = floor(amount_in * fee_numerator / fee_denominator)
    amount_in_net = amount_in - fee_amount
    amount_out = floor(amount_in_net * reserve_out / (reserve_in + amount_in_net))

Swapping A->B and B->A use the same formula with the reserves exchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from amm_engine.constants import BPS_DENOMINATOR, DEFAULT_SLIPPAGE_BPS, MAX_PRICE_IMPACT_PCT
from amm_engine.errors import InsufficientReserves, InvalidSlippage, ZeroAmount
from amm_engine.pool import Direction, PoolSnapshot, validate_fee
from amm_engine.safe_int import S


@dataclass(frozen=True)
class Quote:
    """Preview of a swap against one pool snapshot.

    Valid only until the next mutation of the pool it was derived from.

    Attributes:
        direction: Which reserve the input goes into
        amount_in: Gross input amount, fee included
        amount_out: Output the swap would deliver
        fee_amount: Part of amount_in retained by the pool as fee
        price_impact_bps: amount_in relative to reserve_in, in basis points
        minimum_received: amount_out reduced by the slippage tolerance
    """

    direction: Direction
    amount_in: int
    amount_out: int
    fee_amount: int
    price_impact_bps: int
    minimum_received: int

    @property
    def price_impact_pct(self) -> Decimal:
        return Decimal(self.price_impact_bps) / 100


def quote_swap(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> tuple[int, int]:
    """Calculate swap output and fee for an exact input.

    Args:
        reserve_in: Reserve of the input asset
        reserve_out: Reserve of the output asset
        amount_in: Gross input amount
        fee_numerator: Fee fraction numerator
        fee_denominator: Fee fraction denominator

    Returns:
        Tuple of (amount_out, fee_amount). amount_out is strictly less than
        reserve_out and may be 0 for dust inputs; committing callers must
        reject a zero output.

    Raises:
        ZeroAmount: If amount_in is not positive
        InsufficientReserves: If either reserve is not positive
        InvalidFee: If the fee fraction is outside [0, 1)
    """
    if amount_in <= 0:
        raise ZeroAmount(f"amount_in must be positive, got {amount_in}", amount_in=amount_in)
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientReserves(
            "Pool has no liquidity on one side",
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )
    validate_fee(fee_numerator, fee_denominator)

    fee_amount = S(amount_in).mul_div(fee_numerator, fee_denominator)
    amount_in_net = S(amount_in) - fee_amount
    amount_out = amount_in_net.mul_div(reserve_out, S(reserve_in) + amount_in_net)

    return amount_out.value, fee_amount.value


def get_amount_in(
    reserve_in: int,
    reserve_out: int,
    amount_out: int,
    fee_numerator: int,
    fee_denominator: int,
) -> int:
    """Calculate the smallest input that yields at least amount_out.

    Inverts quote_swap: first the net input needed by the curve (rounded up),
    then the gross input whose fee leaves that much. Floor rounding of the
    fee can make the first estimate short by a unit, so the result is checked
    forward and bumped until it delivers.

    Raises:
        ZeroAmount: If amount_out is not positive
        InsufficientReserves: If amount_out would drain reserve_out
    """
    if amount_out <= 0:
        raise ZeroAmount(f"amount_out must be positive, got {amount_out}", amount_out=amount_out)
    if reserve_in <= 0 or reserve_out <= 0 or amount_out >= reserve_out:
        raise InsufficientReserves(
            f"Cannot extract {amount_out} from reserve of {reserve_out}",
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            amount_out=amount_out,
        )
    validate_fee(fee_numerator, fee_denominator)

    net_in = (S(amount_out) * reserve_in).ceiling_div(S(reserve_out) - amount_out)
    gross_in = (net_in * fee_denominator).ceiling_div(S(fee_denominator) - fee_numerator)
    amount_in = max(gross_in.value, 1)

    while quote_swap(reserve_in, reserve_out, amount_in, fee_numerator, fee_denominator)[0] < amount_out:
        amount_in += 1
    # The ceiling estimates can overshoot by a unit as well
    while (
        amount_in > 1
        and quote_swap(reserve_in, reserve_out, amount_in - 1, fee_numerator, fee_denominator)[0]
        >= amount_out
    ):
        amount_in -= 1

    return amount_in


def price_impact(reserve_in: int, amount_in: int) -> Decimal:
    """Trade size relative to the input reserve, in percent, capped at 100.

    This is a display figure for the policy layer, not an engine invariant.

    Raises:
        InsufficientReserves: If reserve_in is not positive
    """
    if reserve_in <= 0:
        raise InsufficientReserves("Pool has no liquidity on the input side", reserve_in=reserve_in)
    impact = Decimal(amount_in) / Decimal(reserve_in) * 100
    return min(impact, Decimal(MAX_PRICE_IMPACT_PCT))


def price_impact_bps(reserve_in: int, amount_in: int) -> int:
    """Integer form of price_impact in basis points (floored, capped at 10_000)."""
    if reserve_in <= 0:
        raise InsufficientReserves("Pool has no liquidity on the input side", reserve_in=reserve_in)
    return min(S(amount_in).mul_div(BPS_DENOMINATOR, reserve_in).value, BPS_DENOMINATOR)


def spot_price(reserve_in: int, reserve_out: int) -> Decimal:
    """Marginal price of one unit of input, in output units, before fees."""
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientReserves(
            "Pool has no liquidity on one side",
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )
    return Decimal(reserve_out) / Decimal(reserve_in)


def minimum_received(amount_out: int, slippage_bps: int) -> int:
    """Lower bound on output after allowing slippage_bps of adverse movement.

    Raises:
        InvalidSlippage: If slippage_bps is outside [0, 10000]
    """
    if not 0 <= slippage_bps <= BPS_DENOMINATOR:
        raise InvalidSlippage(
            f"Slippage must be within [0, {BPS_DENOMINATOR}] bps, got {slippage_bps}",
            slippage_bps=slippage_bps,
        )
    return S(amount_out).mul_div(BPS_DENOMINATOR - slippage_bps, BPS_DENOMINATOR).value


def quote(
    pool: PoolSnapshot,
    direction: Direction | str,
    amount_in: int,
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
) -> Quote:
    """Preview a swap against a pool snapshot.

    Args:
        pool: Snapshot of the pool (a live Pool works too, but may move)
        direction: Swap direction, as the enum or its wire value ("a_to_b")
        amount_in: Gross input amount
        slippage_bps: Tolerance used to derive minimum_received

    Returns:
        Quote with output, fee, impact, and minimum received
    """
    direction = Direction(direction)
    reserve_in, reserve_out = pool.get_reserves(direction)
    amount_out, fee_amount = quote_swap(
        reserve_in, reserve_out, amount_in, pool.fee_numerator, pool.fee_denominator
    )
    return Quote(
        direction=direction,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=fee_amount,
        price_impact_bps=price_impact_bps(reserve_in, amount_in),
        minimum_received=minimum_received(amount_out, slippage_bps),
    )


__all__ = [
    "Quote",
    "quote_swap",
    "get_amount_in",
    "price_impact",
    "price_impact_bps",
    "spot_price",
    "minimum_received",
    "quote",
]
