"""Checked integer arithmetic for reserves and shares.

Pool amounts are stored as uint64, but every intermediate (reserve * shares,
amount_in * fee_denominator, reserve_a * reserve_b) is computed on Python's
unbounded ints, so nothing wraps mid-formula. What can still go wrong is a
zero divisor or a subtraction below zero, and SafeInt raises on both
instead of returning a nonsense value.

Wrap at entry, unwrap with .value at exit:

    out = S(amount_in_net).mul_div(reserve_out, S(reserve_in) + amount_in_net).value

Range checks against uint64 happen once, when a value is written back to
a pool (see pool.stored_amount).
"""

from __future__ import annotations

import math

UINT64_MAX = 2**64 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""


class DivisionByZero(SafeIntError):
    pass


class Underflow(SafeIntError):
    """A subtraction or square root would go below zero."""


class SafeInt:
    """Non-wrapping integer whose division and subtraction are checked.

    bool is rejected at construction: True is an int, but never an amount.
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _unwrap(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Raises Underflow if the difference is negative."""
        rhs = _unwrap(other)
        if rhs > self._value:
            raise Underflow(f"{self._value} - {rhs} is negative")
        return SafeInt(self._value - rhs)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Floor division. Raises DivisionByZero on a zero divisor."""
        divisor = _unwrap(other)
        if divisor == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // divisor)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _unwrap(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _unwrap(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _unwrap(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _unwrap(other)

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __bool__(self) -> bool:
        return self._value != 0

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Division rounded up, for amounts the pool must not under-charge."""
        divisor = _unwrap(other)
        if divisor == 0:
            raise DivisionByZero(f"ceil({self._value} / 0)")
        return SafeInt(-(-self._value // divisor))

    def mul_div(self, numerator: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """floor(self * numerator / denominator), multiplying first.

        The only rounding is the final floor.
        """
        return (self * numerator) // denominator

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _unwrap(other)))

    def isqrt(self) -> SafeInt:
        return SafeInt(isqrt(self._value))

    def is_uint64(self) -> bool:
        return 0 <= self._value <= UINT64_MAX


def isqrt(n: int) -> int:
    """Floor square root of a non-negative integer.

    Raises:
        Underflow: If n is negative
    """
    if n < 0:
        raise Underflow(f"Square root of negative value: {n}")
    return math.isqrt(n)


def _unwrap(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


S = SafeInt
