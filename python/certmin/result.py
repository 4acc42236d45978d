# CertMin SDK - Result Types
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Result types returned by the minimizer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Optional, TYPE_CHECKING

from .dyadic import DyadicInterval
from .reals import to_float

if TYPE_CHECKING:
    from .candidate import SearchCandidate, BoxKey


def _edge_text(interval: DyadicInterval, offset: int) -> str:
    return interval.go_down(offset).midpoint().to_string(interval.digits())


@dataclass(frozen=True)
class GlobalBound:
    """
    Certified enclosure of the global minimum.

    The minimizer of f over the original domain lies in the product of the
    ``inputs`` ranges and the minimum value lies in ``output``. Each range is
    kept as the pair of dyadic intervals holding its lowest and highest edge.

    ``minimum`` is tighter than ``output``: the minimum is at least the
    lowest certified lower bound and at most the lowest certified upper
    bound, since every frontier box is centred inside the domain.

    Attributes:
        inputs: Per-dimension (lowest, highest) intervals over the frontier
        output: (lowest, highest) output intervals over the frontier
        minimum: (lowest lower, lowest upper) output intervals
    """
    inputs: tuple[tuple[DyadicInterval, DyadicInterval], ...]
    output: tuple[DyadicInterval, DyadicInterval]
    minimum: tuple[DyadicInterval, DyadicInterval]

    def input_range(self, i: int) -> tuple[Fraction, Fraction]:
        lower, upper = self.inputs[i]
        return (lower.lower_edge(), upper.upper_edge())

    def output_range(self) -> tuple[Fraction, Fraction]:
        lower, upper = self.output
        return (lower.lower_edge(), upper.upper_edge())

    def minimum_range(self) -> tuple[Fraction, Fraction]:
        lower, upper = self.minimum
        return (lower.lower_edge(), upper.upper_edge())

    def contains_value(self, value) -> bool:
        lo, hi = self.output_range()
        return lo <= Fraction(value) <= hi

    def describe(self) -> str:
        """Render as ``f([lo,hi]...) ==> [lo,hi]``."""
        params = "".join(
            f"[{_edge_text(lower, -1)},{_edge_text(upper, +1)}]"
            for lower, upper in self.inputs
        )
        lower, upper = self.output
        return f"f({params}) ==> [{_edge_text(lower, -1)},{_edge_text(upper, +1)}]"

    def __str__(self) -> str:
        return self.describe()


@dataclass
class SearchResult:
    """
    Result of one minimization run.

    Attributes:
        global_bound: Text of the certified global enclosure
        local_point: Text of the local estimate's point
        local_value: Text of the local estimate's value
        enclosure: Structured certified enclosure
        best: Candidate the local estimate was taken from
        iterations: Number of branch steps performed
        frontier_size: Live candidates when the search stopped
        history_size: Distinct boxes ever created
        pruned: Candidates discarded by domination
        elapsed: Clock time spent, in the clock's units
        trace: Frontier key sequence per iteration (if recorded)
        additions: Keys added to the history per iteration (if recorded)
    """
    global_bound: str
    local_point: str
    local_value: str
    enclosure: Optional[GlobalBound] = None
    best: Optional['SearchCandidate'] = None
    iterations: int = 0
    frontier_size: int = 0
    history_size: int = 0
    pruned: int = 0
    elapsed: float = 0.0
    trace: list[list['BoxKey']] = field(default_factory=list)
    additions: list[list['BoxKey']] = field(default_factory=list)

    @property
    def local_estimate(self) -> tuple[str, str]:
        """(point description, value description)."""
        return (self.local_point, self.local_value)

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            "SearchResult:",
            f"  Global search result: {self.global_bound}",
            f"  Local search estimate: f({self.local_point}) ==> {self.local_value}",
        ]
        if self.enclosure is not None:
            lo, hi = self.enclosure.minimum_range()
            lines.append(f"  Minimum in: [{to_float(lo):.6g}, {to_float(hi):.6g}]")
        lines += [
            f"  Iterations: {self.iterations}",
            f"  Frontier: {self.frontier_size}",
            f"  History: {self.history_size}",
            f"  Pruned: {self.pruned}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (f"SearchResult({self.global_bound!r}, "
                f"f({self.local_point}) ==> {self.local_value}, "
                f"{self.iterations} iterations)")
