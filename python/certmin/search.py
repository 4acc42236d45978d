# CertMin SDK - Branch-and-Bound Search
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Time-bounded branch-and-bound minimization with certified bounds.

The search keeps a frontier of live candidates and a history of every box
it has created. Each iteration:

1. Branches the front candidate along its steepest dimension
2. Adds the children not seen before to the frontier and the history
3. Re-sorts the frontier: by certified lower bound (global phase) for the
   first part of the time budget, then by derivative score (local phase)
4. Drops every candidate eclipsed by another
5. Picks the new front candidate

When the local phase starts, the union of the frontier is recorded as the
certified global result. The front candidate at the end is the local
estimate.

Example:
    >>> f = polynomial([(1, 0, 3), (-3, 0, 1)])        # x^3 - 3x
    >>> result = minimize(f, domain_exponent=2, time_budget=1.0)
    >>> print(result.global_bound)
    f([...]) ==> [...]
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence
import logging
import time

from .candidate import SearchCandidate
from .dyadic import DyadicInterval
from .exceptions import DomainError
from .functions import FunctionModulus
from .ordering import frontier_bound, global_key, local_key, remove_eclipsed
from .result import SearchResult


logger = logging.getLogger(__name__)

DEFAULT_GLOBAL_PHASE_FRACTION = 0.8
DEFAULT_DIGITS = 10


class IterationClock:
    """
    Logical clock for reproducible searches.

    Every reading advances the clock by ``step``. The engine reads the clock
    once at the start and once per iteration, so a time budget of N with the
    default step runs exactly N iterations.
    """

    def __init__(self, step: float = 1.0, start: float = 0.0):
        self.step = step
        self._now = start

    def __call__(self) -> float:
        now = self._now
        self._now += self.step
        return now


@dataclass
class SearchConfig:
    """
    Configuration for the minimizer.

    Attributes:
        global_phase_fraction: Share of the time budget spent sorting by the
            certified lower bound before switching to the local heuristic
        clock: Callable returning the current time in budget units
        max_iterations: Optional hard cap on branch steps
        digits: Decimal places for printed results (None = as many as the
            interval's level needs, at most DEFAULT_DIGITS)
        record_trace: Store the frontier keys and the keys added to the
            history after every iteration
        log_interval: Iterations between debug frontier statistics
    """
    global_phase_fraction: float = DEFAULT_GLOBAL_PHASE_FRACTION
    clock: Callable[[], float] = time.monotonic
    max_iterations: Optional[int] = None
    digits: Optional[int] = None
    record_trace: bool = False
    log_interval: int = 1000

    @classmethod
    def global_only(cls, **kwargs) -> 'SearchConfig':
        """Never switch to the local phase."""
        return cls(global_phase_fraction=1.0, **kwargs)

    @classmethod
    def deterministic(cls, **kwargs) -> 'SearchConfig':
        """Iteration-counted budget with a recorded trace."""
        return cls(clock=IterationClock(), record_trace=True, **kwargs)

    def validate(self) -> None:
        if not 0.0 <= self.global_phase_fraction <= 1.0:
            raise DomainError(
                f"global_phase_fraction must be in [0, 1], got {self.global_phase_fraction}"
            )
        if self.max_iterations is not None and self.max_iterations < 0:
            raise DomainError(f"max_iterations must be non-negative, got {self.max_iterations}")
        if self.log_interval < 1:
            raise DomainError(f"log_interval must be positive, got {self.log_interval}")


class SearchEngine:
    """
    Branch-and-bound minimizer over the box [-2^(p-1), 2^(p-1)]^n.

    The function and its derivative functions are shared by every candidate.
    Construction validates the request and evaluates the root candidate;
    ``search()`` runs the loop once to completion.
    """

    def __init__(
        self,
        function: FunctionModulus,
        derivatives: Optional[Sequence[FunctionModulus]],
        dimension_count: int,
        start_precision: int,
        time_budget: float,
        config: Optional[SearchConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            function: Function to minimize
            derivatives: One heuristic derivative function per dimension.
                If None, symbolic partial derivatives are used.
            dimension_count: Number of variables
            start_precision: Level p of the starting code (0, p), i.e. the
                domain [-2^(p-1), 2^(p-1)] in every dimension
            time_budget: Time to run, in units of the configured clock
            config: Search configuration

        Raises:
            DomainError: If the request is malformed.
        """
        self.config = config if config is not None else SearchConfig()
        self.config.validate()

        if dimension_count < 1:
            raise DomainError(f"dimension_count must be at least 1, got {dimension_count}")
        if function.arity() > dimension_count:
            raise DomainError(
                f"Function reads {function.arity()} variables but only "
                f"{dimension_count} dimensions were given"
            )
        if derivatives is None:
            derivatives = function.gradient(dimension_count)
        derivatives = list(derivatives)
        if len(derivatives) != dimension_count:
            raise DomainError(
                f"Expected {dimension_count} derivative functions, got {len(derivatives)}"
            )
        for d in derivatives:
            if d.arity() > dimension_count:
                raise DomainError(
                    f"Derivative reads {d.arity()} variables but only "
                    f"{dimension_count} dimensions were given"
                )
        if time_budget < 0:
            raise DomainError(f"time_budget must be non-negative, got {time_budget}")

        self.function = function
        self.derivatives = derivatives
        self.dimension_count = dimension_count
        self.start_precision = start_precision
        self.time_budget = time_budget
        self.initial = SearchCandidate.initial(
            function, derivatives, dimension_count, start_precision
        )

    def _branch_dimension(self, box: SearchCandidate) -> int:
        if self.dimension_count == 1:
            return 0
        return box.steepest_dimension()

    def _text(self, interval: DyadicInterval) -> str:
        digits = self.config.digits
        if digits is None:
            digits = min(max(0, -interval.p), DEFAULT_DIGITS)
        return interval.midpoint().to_string(digits)

    def search(self) -> SearchResult:
        """
        Run the search until the time budget is spent.

        Returns:
            SearchResult with the certified global bound and the local
            estimate.

        Raises:
            PrecisionOverflowError: If the real-number engine is asked for an
                unreasonable precision.
            AbortedError: If an abort was requested during the search.
        """
        cfg = self.config
        clock = cfg.clock
        phase_switch = cfg.global_phase_fraction * self.time_budget

        current = self.initial
        frontier: list[SearchCandidate] = [current]
        history = {current.key()}
        trace = []
        additions = []
        enclosure = None
        iterations = 0
        pruned = 0

        logger.debug(
            "Starting search: %d dimension(s), start precision %d, budget %s",
            self.dimension_count, self.start_precision, self.time_budget,
        )

        start = clock()
        elapsed = 0.0
        while elapsed < self.time_budget:
            if cfg.max_iterations is not None and iterations >= cfg.max_iterations:
                break

            frontier.pop(0)
            added = []
            for box in current.branch_along_dimension(self._branch_dimension(current)):
                key = box.key()
                if key not in history:
                    frontier.append(box)
                    history.add(key)
                    added.append(key)
            iterations += 1

            elapsed = clock() - start
            if elapsed < phase_switch or cfg.global_phase_fraction >= 1.0:
                frontier.sort(key=global_key)
            else:
                if enclosure is None:
                    enclosure = frontier_bound(frontier, self.dimension_count)
                    logger.info(
                        "Switching to local search after %d iterations: %s",
                        iterations, enclosure.describe(),
                    )
                frontier.sort(key=local_key)

            survivors = remove_eclipsed(frontier)
            pruned += len(frontier) - len(survivors)
            frontier = survivors

            if cfg.record_trace:
                trace.append([box.key() for box in frontier])
                additions.append(added)
            if iterations % cfg.log_interval == 0:
                logger.debug(
                    "Iteration %d: frontier=%d history=%d pruned=%d",
                    iterations, len(frontier), len(history), pruned,
                )

            if not frontier:
                break
            current = frontier[0]

        if enclosure is None:
            enclosure = frontier_bound(frontier or [current], self.dimension_count)

        point = ", ".join(self._text(d) for d in current.inputs)
        value = self._text(current.output.centre)

        logger.info(
            "Search finished after %d iterations: frontier=%d history=%d pruned=%d",
            iterations, len(frontier), len(history), pruned,
        )

        return SearchResult(
            global_bound=enclosure.describe(),
            local_point=point,
            local_value=value,
            enclosure=enclosure,
            best=current,
            iterations=iterations,
            frontier_size=len(frontier),
            history_size=len(history),
            pruned=pruned,
            elapsed=elapsed,
            trace=trace,
            additions=additions,
        )


def minimize(
    function: FunctionModulus,
    domain_exponent: int,
    time_budget: float,
    derivatives: Optional[Sequence[FunctionModulus]] = None,
    dimension_count: Optional[int] = None,
    config: Optional[SearchConfig] = None,
) -> SearchResult:
    """
    Minimize a function over [-2^n, 2^n]^d.

    Args:
        function: Function to minimize
        domain_exponent: n, so the domain is [-2^n, 2^n] in every dimension
        time_budget: Seconds to run (or clock units if config sets a clock)
        derivatives: Heuristic derivative functions (None = symbolic)
        dimension_count: d; defaults to the number of variables f reads
        config: Search configuration

    Returns:
        SearchResult
    """
    if dimension_count is None:
        dimension_count = max(function.arity(), 1)
    engine = SearchEngine(
        function,
        derivatives,
        dimension_count,
        DyadicInterval.from_domain(domain_exponent).p,
        time_budget,
        config,
    )
    return engine.search()
