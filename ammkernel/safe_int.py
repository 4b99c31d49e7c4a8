"""Checked integer arithmetic for reserves, shares and token amounts.

Token amounts, reserves and share supplies are never negative. SafeInt holds
such a quantity and refuses to leave that domain:
- Constructing or subtracting into a negative value raises Underflow
- Dividing by zero (an empty reserve or supply) raises DivisionByZero

Usage pattern:
    from ammkernel.safe_int import S

    def shares_for(amount: int, supply: int, reserve: int) -> int:
        return (S(amount) * supply // reserve).value
"""

from __future__ import annotations

import math
from functools import total_ordering


class SafeIntError(ArithmeticError):
    """Base class for checked arithmetic errors."""


class DivisionByZero(SafeIntError):
    """Division by an empty quantity."""


class Underflow(SafeIntError):
    """A quantity would become negative."""


def _operand(x: SafeInt | int) -> int:
    return x.value if isinstance(x, SafeInt) else x


@total_ordering
class SafeInt:
    """Non-negative integer quantity with checked arithmetic.

    Attributes:
        value: The underlying integer (read-only)
    """

    __slots__ = ("_value",)

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            value = value.value
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"Quantity cannot be negative: {value}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"S({self._value})"

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _operand(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Raises Underflow if `other` exceeds this quantity."""
        subtrahend = _operand(other)
        if subtrahend > self._value:
            raise Underflow(f"{self._value} - {subtrahend} is negative")
        return SafeInt(self._value - subtrahend)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _operand(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Raises DivisionByZero for a zero divisor."""
        divisor = _operand(other)
        if divisor == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // divisor)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)):
            return self._value == _operand(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _operand(other)

    def __hash__(self) -> int:
        return hash(self._value)

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _operand(other)))

    def isqrt(self) -> SafeInt:
        """Floor of the square root."""
        return SafeInt(math.isqrt(self._value))


S = SafeInt
