# CertMin SDK - Candidate Ordering and Domination
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Orders over search candidates and the domination ("eclipse") test.

Two kinds of information drive the search:

1. Global: the certified lower bound of a candidate's output. Sorting by it
   explores the boxes that might still hold the global minimum.
2. Local: the sum of |partial derivatives| at the box centre. Small values
   suggest a nearby stationary point; sorting by it homes in on a local
   minimizer.

Only ``eclipses`` removes candidates, and it is sound: when a's certified
upper bound lies strictly below b's certified lower bound, b cannot hold the
global minimum.

Bounds of intervals at different precision levels are compared on integer
codes: the coarser code is scaled down to the finer level, biased toward the
edge being compared, so no rational arithmetic is needed.
"""

from __future__ import annotations
from functools import cmp_to_key
from typing import Sequence

from .candidate import SearchCandidate
from .dyadic import DyadicInterval
from .result import GlobalBound


def _sign(n) -> int:
    return (n > 0) - (n < 0)


def _scale_to(coarse: DyadicInterval, level: int, bias: int) -> int:
    """
    Edge code of ``coarse`` at a finer ``level``.

    The first doubling carries the bias (-1 toward the lower edge, +1 toward
    the upper edge); the remaining doublings are plain shifts.
    """
    return ((coarse.k << 1) + bias) << (coarse.p - 1 - level)


def compare_lower_bound(a: DyadicInterval, b: DyadicInterval) -> int:
    """
    Compare the lower edges of two intervals.

    Returns -1, 0 or 1. Across different levels the finer interval wins a
    tie, i.e. it is treated as strictly smaller.
    """
    if a.p == b.p:
        return _sign(a.k - b.k)
    if a.p < b.p:
        c = _sign(a.k - _scale_to(b, a.p, -1))
        return -1 if c == 0 else c
    c = _sign(_scale_to(a, b.p, -1) - b.k)
    return 1 if c == 0 else c


def compare_upper_bound(a: DyadicInterval, b: DyadicInterval) -> int:
    """
    Compare the upper edges of two intervals.

    Returns -1, 0 or 1. Across different levels the finer interval wins a
    tie, i.e. it is treated as strictly larger.
    """
    if a.p == b.p:
        return _sign(a.k - b.k)
    if a.p < b.p:
        c = _sign(a.k - _scale_to(b, a.p, +1))
        return 1 if c == 0 else c
    c = _sign(_scale_to(a, b.p, +1) - b.k)
    return -1 if c == 0 else c


def derivative_score(box: SearchCandidate) -> float:
    return box.derivative_score()


def compare_derivatives(a: SearchCandidate, b: SearchCandidate) -> int:
    # scores may be inf; inf - inf would be nan
    sa, sb = derivative_score(a), derivative_score(b)
    return (sa > sb) - (sa < sb)


def compare_global(a: SearchCandidate, b: SearchCandidate) -> int:
    """Certified lower bound first, then derivative score."""
    c = compare_lower_bound(a.output.lower, b.output.lower)
    if c == 0:
        return compare_derivatives(a, b)
    return c


def compare_local(a: SearchCandidate, b: SearchCandidate) -> int:
    """Derivative score first, then certified lower bound."""
    c = compare_derivatives(a, b)
    if c == 0:
        return compare_lower_bound(a.output.lower, b.output.lower)
    return c


global_key = cmp_to_key(compare_global)
local_key = cmp_to_key(compare_local)


def eclipses(a: SearchCandidate, b: SearchCandidate) -> bool:
    """
    True if a's certified upper bound is strictly below b's certified lower
    bound, proving that b cannot contain the global minimum.
    """
    upper = a.output.upper
    lower = b.output.lower
    level = min(upper.p, lower.p) - 1
    return _scale_to(upper, level, +1) < _scale_to(lower, level, -1)


def lowest_upper_bound(frontier: Sequence[SearchCandidate]) -> SearchCandidate:
    """The candidate whose certified upper bound is smallest."""
    best = frontier[0]
    for box in frontier[1:]:
        if compare_upper_bound(box.output.upper, best.output.upper) < 0:
            best = box
    return best


def find_eclipsed(frontier: Sequence[SearchCandidate]) -> list[SearchCandidate]:
    """
    Every candidate eclipsed by some other candidate of the frontier.

    Some candidate eclipses b exactly when the lowest certified upper bound
    does, so one pass suffices.
    """
    if not frontier:
        return []
    best = lowest_upper_bound(frontier)
    return [box for box in frontier if eclipses(best, box)]


def remove_eclipsed(frontier: Sequence[SearchCandidate]) -> list[SearchCandidate]:
    """A new list holding the candidates no other candidate eclipses."""
    if not frontier:
        return []
    best = lowest_upper_bound(frontier)
    return [box for box in frontier if not eclipses(best, box)]


def union_input(
    frontier: Sequence[SearchCandidate], i: int
) -> tuple[DyadicInterval, DyadicInterval]:
    """Intervals holding the lowest and highest edge of dimension i."""
    lower = upper = frontier[0].inputs[i]
    for box in frontier[1:]:
        current = box.inputs[i]
        if compare_lower_bound(current, lower) < 0:
            lower = current
        if compare_upper_bound(upper, current) < 0:
            upper = current
    return (lower, upper)


def union_output(
    frontier: Sequence[SearchCandidate],
) -> tuple[DyadicInterval, DyadicInterval]:
    """Intervals holding the lowest and highest certified output edge."""
    lower = frontier[0].output.lower
    upper = frontier[0].output.upper
    for box in frontier[1:]:
        if compare_lower_bound(box.output.lower, lower) < 0:
            lower = box.output.lower
        if compare_upper_bound(upper, box.output.upper) < 0:
            upper = box.output.upper
    return (lower, upper)


def frontier_bound(frontier: Sequence[SearchCandidate], dimension_count: int) -> GlobalBound:
    """Certified enclosure of the global minimizer and minimum over a frontier."""
    output = union_output(frontier)
    return GlobalBound(
        inputs=tuple(union_input(frontier, i) for i in range(dimension_count)),
        output=output,
        minimum=(output[0], lowest_upper_bound(frontier).output.upper),
    )


def describe_frontier(frontier: Sequence[SearchCandidate], dimension_count: int) -> str:
    return frontier_bound(frontier, dimension_count).describe()
