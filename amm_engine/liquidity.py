"""Share issuance and redemption.

Share math:
- First deposit: shares = isqrt(amount_a * amount_b), the geometric mean,
  so the result does not depend on which asset is called "a".
- Later deposits: shares = min(amount_a * supply // reserve_a,
  amount_b * supply // reserve_b). The excess of an imbalanced deposit is
  kept by the pool and accrues to existing holders.
- Redemption: amount_x = reserve_x * shares_in // supply. The product is
  formed on unbounded ints (multiply-then-divide), so only the final floor
  rounds and a full redemption returns the reserves exactly.

The mutating functions check everything before writing, so a raised error
leaves the pool untouched.
"""

from __future__ import annotations

from dataclasses import dataclass

from amm_engine.errors import InsufficientShares, SlippageExceeded, ZeroAmount
from amm_engine.pool import Pool, stored_amount, validate_fee
from amm_engine.safe_int import S


@dataclass(frozen=True)
class Redemption:
    """Assets paid out for burned shares."""

    shares_burned: int
    amount_a: int
    amount_b: int


def initial_shares(amount_a: int, amount_b: int) -> int:
    """Shares minted by the first deposit into an empty pool.

    Raises:
        ZeroAmount: If either amount is not positive
    """
    if amount_a <= 0 or amount_b <= 0:
        raise ZeroAmount(
            "Initial deposit requires both assets",
            amount_a=amount_a,
            amount_b=amount_b,
        )
    return (S(amount_a) * amount_b).isqrt().value


def shares_for_deposit(
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    share_supply: int,
) -> int:
    """Shares a deposit would mint against the given pool state.

    Falls back to the first-deposit rule when share_supply is zero.
    """
    if amount_a < 0 or amount_b < 0:
        raise ZeroAmount("Deposit amounts cannot be negative", amount_a=amount_a, amount_b=amount_b)
    if share_supply == 0:
        return initial_shares(amount_a, amount_b)

    shares_from_a = S(amount_a).mul_div(share_supply, reserve_a)
    shares_from_b = S(amount_b).mul_div(share_supply, reserve_b)
    return shares_from_a.min(shares_from_b).value


def amounts_for_redemption(
    shares_in: int,
    reserve_a: int,
    reserve_b: int,
    share_supply: int,
) -> tuple[int, int]:
    """Assets returned for burning shares_in of share_supply.

    Raises:
        ZeroAmount: If shares_in is not positive
        InsufficientShares: If shares_in exceeds share_supply
    """
    if shares_in <= 0:
        raise ZeroAmount(f"shares_in must be positive, got {shares_in}", shares_in=shares_in)
    if shares_in > share_supply:
        raise InsufficientShares(
            f"Cannot redeem {shares_in} of {share_supply} shares",
            shares_in=shares_in,
            share_supply=share_supply,
        )
    amount_a = S(reserve_a).mul_div(shares_in, share_supply)
    amount_b = S(reserve_b).mul_div(shares_in, share_supply)
    return amount_a.value, amount_b.value


def optimal_deposit(reserve_a: int, reserve_b: int, amount_a: int) -> int:
    """Amount of asset b that matches amount_a at the current pool ratio.

    Rounded up so that the b side never becomes the limiting side of
    shares_for_deposit for this amount_a.
    """
    if amount_a <= 0:
        raise ZeroAmount(f"amount_a must be positive, got {amount_a}", amount_a=amount_a)
    if reserve_a <= 0:
        raise ZeroAmount("Pool has no reserves to take a ratio from", reserve_a=reserve_a)
    return (S(amount_a) * reserve_b).ceiling_div(reserve_a).value


def create_pool(
    pool_id: str,
    asset_a: str,
    asset_b: str,
    amount_a: int,
    amount_b: int,
    fee_numerator: int,
    fee_denominator: int,
) -> tuple[Pool, int]:
    """Build a pool seeded with its first deposit.

    Returns:
        Tuple of (pool, shares_minted)

    Raises:
        ZeroAmount: If either amount is not positive
        InvalidFee: If the fee fraction is outside [0, 1)
        InvalidPool: If asset_a == asset_b
        ReserveOverflow: If a deposit does not fit in uint64
    """
    validate_fee(fee_numerator, fee_denominator)
    shares = initial_shares(amount_a, amount_b)
    pool = Pool(
        pool_id=pool_id,
        asset_a=asset_a,
        asset_b=asset_b,
        reserve_a=stored_amount(amount_a, "reserve_a"),
        reserve_b=stored_amount(amount_b, "reserve_b"),
        share_supply=stored_amount(shares, "share_supply"),
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )
    return pool, shares


def add_liquidity(
    pool: Pool,
    amount_a_desired: int,
    amount_b_desired: int,
    min_shares_out: int = 0,
) -> int:
    """Deposit both assets and mint shares.

    The full deposited amounts go into the reserves, including any part of
    an imbalanced deposit that earned no shares.

    Returns:
        Number of shares minted

    Raises:
        ZeroAmount: If the deposit would mint no shares (or, for an empty
            pool, either amount is zero)
        SlippageExceeded: If fewer than min_shares_out shares would be minted
        ReserveOverflow: If a reserve or the supply would exceed uint64
    """
    shares = shares_for_deposit(
        amount_a_desired,
        amount_b_desired,
        pool.reserve_a,
        pool.reserve_b,
        pool.share_supply,
    )
    if shares == 0:
        raise ZeroAmount(
            "Deposit too small to mint any shares",
            pool_id=pool.pool_id,
            amount_a=amount_a_desired,
            amount_b=amount_b_desired,
        )
    if shares < min_shares_out:
        raise SlippageExceeded(
            f"Deposit mints {shares} shares, below minimum {min_shares_out}",
            pool_id=pool.pool_id,
            shares_minted=shares,
            min_shares_out=min_shares_out,
        )

    new_reserve_a = stored_amount(S(pool.reserve_a) + amount_a_desired, "reserve_a")
    new_reserve_b = stored_amount(S(pool.reserve_b) + amount_b_desired, "reserve_b")
    new_supply = stored_amount(S(pool.share_supply) + shares, "share_supply")

    pool.reserve_a = new_reserve_a
    pool.reserve_b = new_reserve_b
    pool.share_supply = new_supply
    return shares


def remove_liquidity(
    pool: Pool,
    shares_in: int,
    min_amount_a: int = 0,
    min_amount_b: int = 0,
) -> Redemption:
    """Burn shares and pay out the proportional slice of both reserves.

    Burning the whole supply empties the pool; it then stays inert until a
    deposit re-seeds it under the first-deposit rule.

    Raises:
        ZeroAmount: If shares_in is not positive
        InsufficientShares: If shares_in exceeds the pool's share supply
        SlippageExceeded: If either payout is below its minimum
    """
    amount_a, amount_b = amounts_for_redemption(
        shares_in, pool.reserve_a, pool.reserve_b, pool.share_supply
    )
    if amount_a < min_amount_a or amount_b < min_amount_b:
        raise SlippageExceeded(
            f"Withdrawal pays ({amount_a}, {amount_b}), below minimum "
            f"({min_amount_a}, {min_amount_b})",
            pool_id=pool.pool_id,
            amount_a=amount_a,
            amount_b=amount_b,
            min_amount_a=min_amount_a,
            min_amount_b=min_amount_b,
        )

    pool.share_supply = (S(pool.share_supply) - shares_in).value
    pool.reserve_a = (S(pool.reserve_a) - amount_a).value
    pool.reserve_b = (S(pool.reserve_b) - amount_b).value
    return Redemption(shares_burned=shares_in, amount_a=amount_a, amount_b=amount_b)


__all__ = [
    "Redemption",
    "initial_shares",
    "shares_for_deposit",
    "amounts_for_redemption",
    "optimal_deposit",
    "create_pool",
    "add_liquidity",
    "remove_liquidity",
]
