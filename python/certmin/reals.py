# CertMin SDK - Exact Real Numbers
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Exact real-number engine used by every certified computation.

Every function CertMin builds (constants, projections, sums, products,
powers) is closed over the rationals, and every input is a dyadic interval
centre, so values are held exactly as ``Fraction``. The engine contract the
search relies on is:

- exact ``+ - * /``, ``abs`` and integer powers;
- ``approx(n)`` returning an integer ``m`` with ``|m * 2^n - x| <= 2^n``;
- ``log2_ceil()`` giving the binary order of magnitude of a positive value;
- ``to_string(digits)`` for display.

``approx`` refuses precisions beyond ``PRECISION_LIMIT`` bits and honours a
module-wide abort flag, raising ``PrecisionOverflowError`` or
``AbortedError`` respectively.

Example:
    >>> x = Real(3) / 4
    >>> x.approx(-2)
    3
    >>> x.to_string(3)
    '0.750'
"""

from __future__ import annotations
from fractions import Fraction
from functools import total_ordering
from typing import Union
import math
import threading

from .exceptions import AbortedError, DomainError, PrecisionOverflowError


# Bit budget for approximations.
PRECISION_LIMIT = 1 << 28

_abort_event = threading.Event()


def request_abort() -> None:
    """Ask every in-flight approximation to stop with ``AbortedError``."""
    _abort_event.set()


def clear_abort() -> None:
    """Clear a previous abort request."""
    _abort_event.clear()


def abort_requested() -> bool:
    """Return True if an abort has been requested and not yet cleared."""
    return _abort_event.is_set()


RealLike = Union['Real', Fraction, int, float, str]


def to_fraction(value: RealLike) -> Fraction:
    """
    Convert a number to an exact Fraction.

    Floats are converted exactly (their binary value, not their decimal
    repr). Strings accept decimal ("1.25") and rational ("5/4") forms.

    Raises:
        DomainError: For non-finite floats.
        TypeError: For unsupported types.
    """
    if isinstance(value, Real):
        return value.to_fraction()
    if isinstance(value, Fraction):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise DomainError(f"Cannot represent {value} exactly")
        return Fraction(value)
    if isinstance(value, (int, str)):
        return Fraction(value)
    try:
        return Fraction(value)
    except TypeError:
        raise TypeError(f"Cannot convert {type(value).__name__} to a real number")


def to_float(value: RealLike) -> float:
    """
    Nearest float to a number, saturating to +/-inf instead of overflowing.

    Only for heuristics and display; never for certified bounds.
    """
    x = to_fraction(value)
    try:
        return float(x)
    except OverflowError:
        return math.inf if x > 0 else -math.inf


def pow2(n: int) -> Fraction:
    """Exact 2^n for any integer n."""
    if n >= 0:
        return Fraction(1 << n)
    return Fraction(1, 1 << -n)


def _shift(value: Fraction, n: int) -> Fraction:
    if n >= 0:
        return value * (1 << n)
    return value / (1 << -n)


@total_ordering
class Real:
    """An exact real number with 1-ulp approximations at any binary precision."""

    __slots__ = ('_value',)

    def __init__(self, value: RealLike = 0):
        self._value = to_fraction(value)

    @classmethod
    def _wrap(cls, value: Fraction) -> Real:
        obj = cls.__new__(cls)
        obj._value = value
        return obj

    def to_fraction(self) -> Fraction:
        return self._value

    # -- arithmetic ---------------------------------------------------------

    def __add__(self, other: RealLike) -> Real:
        return Real._wrap(self._value + to_fraction(other))

    __radd__ = __add__

    def __sub__(self, other: RealLike) -> Real:
        return Real._wrap(self._value - to_fraction(other))

    def __rsub__(self, other: RealLike) -> Real:
        return Real._wrap(to_fraction(other) - self._value)

    def __mul__(self, other: RealLike) -> Real:
        return Real._wrap(self._value * to_fraction(other))

    __rmul__ = __mul__

    def __truediv__(self, other: RealLike) -> Real:
        divisor = to_fraction(other)
        if divisor == 0:
            raise ZeroDivisionError("Real division by zero")
        return Real._wrap(self._value / divisor)

    def __rtruediv__(self, other: RealLike) -> Real:
        if self._value == 0:
            raise ZeroDivisionError("Real division by zero")
        return Real._wrap(to_fraction(other) / self._value)

    def __neg__(self) -> Real:
        return Real._wrap(-self._value)

    def __pos__(self) -> Real:
        return self

    def __abs__(self) -> Real:
        return Real._wrap(abs(self._value))

    def __pow__(self, exponent: int) -> Real:
        if not isinstance(exponent, int):
            raise TypeError("Real only supports integer powers")
        if exponent < 0 and self._value == 0:
            raise ZeroDivisionError("Zero raised to a negative power")
        return Real._wrap(self._value ** exponent)

    def shift(self, n: int) -> Real:
        """Multiply by 2^n exactly."""
        return Real._wrap(_shift(self._value, n))

    # -- comparison ---------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        try:
            return self._value == to_fraction(other)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return NotImplemented

    def __lt__(self, other: RealLike) -> bool:
        return self._value < to_fraction(other)

    def __hash__(self) -> int:
        return hash(self._value)

    def __bool__(self) -> bool:
        return self._value != 0

    def sign(self) -> int:
        return (self._value > 0) - (self._value < 0)

    # -- approximation ------------------------------------------------------

    def approx(self, n: int) -> int:
        """
        Approximate this value to precision 2^n.

        Returns the integer m nearest to x / 2^n (halves round up), so that
        |m * 2^n - x| <= 2^(n-1) <= 2^n.

        Raises:
            PrecisionOverflowError: If |n| exceeds PRECISION_LIMIT.
            AbortedError: If an abort has been requested.
        """
        if abs(n) > PRECISION_LIMIT:
            raise PrecisionOverflowError(n, PRECISION_LIMIT)
        if _abort_event.is_set():
            raise AbortedError(f"Approximation at precision 2^{n} was aborted")
        return math.floor(_shift(self._value, -n) + Fraction(1, 2))

    def log2_ceil(self) -> int:
        """
        Least integer n such that this value is at most 2^n.

        Raises:
            DomainError: If the value is not strictly positive.
        """
        x = self._value
        if x <= 0:
            raise DomainError(f"log2 of non-positive value {x}")
        n = x.numerator.bit_length() - x.denominator.bit_length()
        while x > pow2(n):
            n += 1
        while x <= pow2(n - 1):
            n -= 1
        return n

    # -- display ------------------------------------------------------------

    def to_string(self, digits: int = 10) -> str:
        """Decimal rendering rounded to ``digits`` places after the point."""
        digits = max(0, digits)
        scaled = math.floor(abs(self._value) * 10 ** digits + Fraction(1, 2))
        sign = '-' if self._value < 0 and scaled != 0 else ''
        text = str(scaled).rjust(digits + 1, '0')
        if digits == 0:
            return sign + text
        return f"{sign}{text[:-digits]}.{text[-digits:]}"

    def __float__(self) -> float:
        return float(self._value)

    def to_float(self) -> float:
        """``float(self)``, but +/-inf when the value is out of float range."""
        return to_float(self._value)

    def __repr__(self) -> str:
        return f"Real({str(self._value)!r})"

    def __str__(self) -> str:
        return str(self._value)


ZERO = Real(0)
ONE = Real(1)
