# CertMin SDK - Search Candidates
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Search candidates ("boxes") for the branch-and-bound minimizer.

A candidate is one node of the search tree: a box of dyadic intervals, the
certified image of the function over that box, and a vector of heuristic
partial-derivative values taken at the box centre. All of the expensive
work happens once, in the constructor.
"""

from __future__ import annotations
from itertools import product
from typing import Iterable, Sequence

import numpy as np

from .dyadic import DyadicInterval
from .functions import FunctionModulus, OutputTriple
from .reals import Real


BoxKey = tuple[tuple[int, int], ...]


class SearchCandidate:
    """
    One box of the search.

    Attributes:
        initials: The original domain box, fixed for the whole search
        inputs: The current box, refined from ``initials``
        function: Shared function being minimized
        derivative_functions: Shared heuristic derivative functions
        output: Certified enclosure of the function over ``inputs``
        derivatives: Heuristic derivative values at the box centre
    """

    __slots__ = (
        'initials', 'inputs', 'function', 'derivative_functions',
        'output', 'derivatives', '_key',
    )

    def __init__(
        self,
        initials: Sequence[DyadicInterval],
        inputs: Sequence[DyadicInterval],
        function: FunctionModulus,
        derivative_functions: Sequence[FunctionModulus],
    ):
        self.initials = tuple(initials)
        self.inputs = tuple(inputs)
        self.function = function
        self.derivative_functions = tuple(derivative_functions)
        self._key: BoxKey = tuple(d.key() for d in self.inputs)

        self.output: OutputTriple = function.apply(self.inputs)
        self.derivatives = np.array(
            [d.apply_centre(self.inputs).to_float() for d in self.derivative_functions],
            dtype=float,
        )

    @classmethod
    def initial(
        cls,
        function: FunctionModulus,
        derivative_functions: Sequence[FunctionModulus],
        dimension_count: int,
        start_precision: int,
    ) -> SearchCandidate:
        """The root candidate: every dimension is the code (0, start_precision)."""
        box = [DyadicInterval(0, start_precision) for _ in range(dimension_count)]
        return cls(box, box, function, derivative_functions)

    @property
    def dimension_count(self) -> int:
        return len(self.inputs)

    def key(self) -> BoxKey:
        """Exact identity of the input box, for history membership."""
        return self._key

    def _with_input(self, i: int, interval: DyadicInterval) -> SearchCandidate:
        inputs = list(self.inputs)
        inputs[i] = interval
        return SearchCandidate(self.initials, inputs, self.function, self.derivative_functions)

    def branch_along_dimension(self, i: int) -> list[SearchCandidate]:
        """
        Refine the box along dimension i.

        Returns one candidate per child of ``inputs[i].branch()`` that still
        belongs to the original domain, so near the domain boundary fewer
        than three candidates come back.
        """
        return [
            self._with_input(i, child)
            for child in self.inputs[i].branch()
            if child.is_within(self.initials[i])
        ]

    def branch_all(self) -> list[SearchCandidate]:
        """Refine along every dimension at once (up to 3^n candidates)."""
        choices = [
            [child for child in interval.branch() if child.is_within(initial)]
            for interval, initial in zip(self.inputs, self.initials)
        ]
        return [
            SearchCandidate(self.initials, box, self.function, self.derivative_functions)
            for box in product(*choices)
        ]

    def same_as(self, other: SearchCandidate) -> bool:
        """True if every input interval has the same code and precision."""
        return all(a.same_as(b) for a, b in zip(self.inputs, other.inputs))

    def already_in(self, history: Iterable[BoxKey]) -> bool:
        return self._key in history

    def centre(self) -> tuple[Real, ...]:
        return tuple(d.midpoint() for d in self.inputs)

    def abs_derivatives(self) -> np.ndarray:
        return np.abs(self.derivatives)

    def derivative_score(self) -> float:
        """Sum of absolute heuristic derivatives; guidance only, never certified."""
        return float(np.sum(np.abs(self.derivatives)))

    def steepest_dimension(self) -> int:
        """Dimension with the largest |derivative| (first one on ties)."""
        if self.dimension_count <= 1 or self.derivatives.size == 0:
            return 0
        return int(np.argmax(np.abs(self.derivatives)))

    def describe(self) -> str:
        boxes = "".join(d.describe() for d in self.inputs)
        return f"f({boxes}) ==> {self.output.describe()}"

    def __repr__(self) -> str:
        inputs = ", ".join(str(d) for d in self.inputs)
        return (f"SearchCandidate([{inputs}] ==> {self.output.describe()} "
                f"-- {self.derivatives.tolist()})")
