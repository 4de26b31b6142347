"""Pool engine error classes.

Every error is a deterministic function of the inputs and the current pool
state. A raised error always means the mutation was not applied.
"""

from __future__ import annotations

from typing import Any


class PoolError(Exception):
    """Base error for pool engine operations.

    Attributes:
        code: Stable machine-readable identifier for callers to map on
        context: Values that explain the failure (amounts, reserves, ids)
    """

    code = "pool_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Structured form for callers that surface errors up their own stack."""
        return {"code": self.code, "message": str(self), "context": dict(self.context)}


class ZeroAmount(PoolError):
    """An amount that must be positive was zero or negative."""

    code = "zero_amount"


class InsufficientReserves(PoolError):
    """The pool cannot supply the requested output."""

    code = "insufficient_reserves"


class InsufficientOutputAmount(PoolError):
    """The pricing formula produced zero output."""

    code = "insufficient_output_amount"


class SlippageExceeded(PoolError):
    """The committed result violates the caller's minimum bound."""

    code = "slippage_exceeded"


class InsufficientShares(PoolError):
    """More shares were redeemed than exist or than the position holds."""

    code = "insufficient_shares"


class InvalidFee(PoolError):
    """Fee must satisfy 0 <= numerator < denominator."""

    code = "invalid_fee"


class InvalidPool(PoolError):
    """Pool definition is malformed (e.g. both sides are the same asset)."""

    code = "invalid_pool"


class InvalidSlippage(PoolError):
    """Slippage tolerance must be within [0, 10000] basis points."""

    code = "invalid_slippage"


class ReserveOverflow(PoolError):
    """A stored reserve or share supply would exceed uint64."""

    code = "reserve_overflow"


class InvariantViolation(PoolError):
    """reserve_a * reserve_b would decrease as the result of a swap."""

    code = "invariant_violation"


class PoolNotFound(PoolError):
    code = "pool_not_found"


class PositionNotFound(PoolError):
    code = "position_not_found"


class PositionOwnershipError(PoolError):
    """A position was used by someone other than its owner, or against another pool."""

    code = "position_ownership"


class PolicyViolation(PoolError):
    """Base error for caller-side trade policy rejections."""

    code = "policy_violation"


class PriceImpactTooHigh(PolicyViolation):
    code = "price_impact_too_high"


class InputTooLarge(PolicyViolation):
    """Trade input exceeds the allowed fraction of the input reserve."""

    code = "input_too_large"


class DuplicatePool(PoolError):
    """A pool for this asset pair and fee tier is already listed."""

    code = "duplicate_pool"


class DuplicateId(PoolError):
    """An id from the engine's id source is already taken."""

    code = "duplicate_id"
