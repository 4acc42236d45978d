# CertMin SDK - Dyadic Interval Codes
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Dyadic interval codes.

A code ``(k, p)`` stands for the closed interval

    [k * 2^p - 2^(p-1), k * 2^p + 2^(p-1)]

i.e. the interval centred at ``k * 2^p`` with width ``2^p``. Larger ``p``
means a coarser interval. Branching moves one level down and produces three
overlapping children (a "brick" pattern), so the children always cover the
parent and neighbouring bricks share children.

Example:
    >>> d = DyadicInterval(1, 1)
    >>> d.describe()
    '[1,3]'
    >>> [c.key() for c in d.branch()]
    [(1, 0), (2, 0), (3, 0)]
"""

from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction

from .reals import Real, pow2


@dataclass(frozen=True)
class DyadicInterval:
    """
    Exact interval encoded by an integer code and a precision level.

    Attributes:
        k: Integer code; the centre is k * 2^p
        p: Precision level; the width is 2^p
    """
    k: int
    p: int

    @classmethod
    def from_domain(cls, n: int) -> DyadicInterval:
        """The code for the symmetric domain [-2^n, 2^n]."""
        return cls(0, n + 1)

    def key(self) -> tuple[int, int]:
        return (self.k, self.p)

    def midpoint(self) -> Real:
        """The centre k * 2^p as an exact real."""
        return Real(self.k).shift(self.p)

    def half_width(self) -> Real:
        return Real(1).shift(self.p - 1)

    def lower_edge(self) -> Fraction:
        return (2 * self.k - 1) * pow2(self.p - 1)

    def upper_edge(self) -> Fraction:
        return (2 * self.k + 1) * pow2(self.p - 1)

    def contains(self, x) -> bool:
        """True if the real number x lies in the represented interval."""
        value = Real(x).to_fraction()
        return self.lower_edge() <= value <= self.upper_edge()

    def go_down(self, offset: int) -> DyadicInterval:
        """The code one level down, offset from the centre child by ``offset``."""
        return DyadicInterval(2 * self.k + offset, self.p - 1)

    def branch(self) -> list[DyadicInterval]:
        """The three children one level down: codes 2k-1, 2k, 2k+1."""
        return [self.go_down(-1), self.go_down(0), self.go_down(+1)]

    def same_as(self, other: DyadicInterval) -> bool:
        """
        Exact code identity.

        Two codes at different levels are never the same, even when they
        happen to describe overlapping or equal real intervals.
        """
        return self.k == other.k and self.p == other.p

    def is_within(self, other: DyadicInterval) -> bool:
        """
        True if this finer code belongs to the coarser code ``other``.

        A code belongs to ``other`` when its centre lies in the closed
        interval ``other`` represents, which for a code i levels finer means
        k in [2^i k' - 2^(i-1), 2^i k' + 2^(i-1)]. Codes that fail this test
        are disjoint from ``other``, while the codes that pass it cover
        ``other`` completely. A coarser code never belongs to a finer one;
        at equal levels this is ``same_as``.
        """
        i = other.p - self.p
        if i <= 0:
            return self.same_as(other)
        centre = other.k << i
        reach = 1 << (i - 1)
        return centre - reach <= self.k <= centre + reach

    def digits(self) -> int:
        """Decimal places needed to print the edges of this interval exactly."""
        return max(0, -self.p + 1)

    def describe(self) -> str:
        """The interval as ``[lo,hi]``."""
        lower = self.go_down(-1).midpoint().to_string(self.digits())
        upper = self.go_down(+1).midpoint().to_string(self.digits())
        return f"[{lower},{upper}]"

    def __str__(self) -> str:
        return f"{self.describe()} ({self.k},{self.p})"
