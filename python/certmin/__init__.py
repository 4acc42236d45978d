# CertMin SDK
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
CertMin Python SDK - Certified Global Minimization.

CertMin minimizes real functions over boxes with exact dyadic interval
arithmetic. The reported global bound is guaranteed to contain the true
minimum; the local estimate is a heuristic refinement toward a minimizer.

Example:
    >>> import certmin as cm
    >>> x = cm.projection(0)
    >>> result = cm.minimize(x**3 - 3 * x, domain_exponent=2, time_budget=2.0)
    >>> print(result.global_bound)
    >>> print(result.local_estimate)

Key Features:
    - Exact dyadic interval codes with adaptive precision
    - Functions carrying a modulus of continuity, built from combinators
    - Sound pruning by domination of certified bounds
    - Two-phase (global, then local) time-sliced search
"""

__version__ = "0.1.0"

# Real-number engine
from .reals import (
    Real,
    to_fraction,
    to_float,
    request_abort,
    clear_abort,
    abort_requested,
    PRECISION_LIMIT,
)

# Interval codes
from .dyadic import DyadicInterval

# Functions
from .functions import (
    FunctionKind,
    FunctionModulus,
    OutputTriple,
    PolynomialTerm,
    constant,
    projection,
    add,
    multiply,
    power,
    polynomial,
    nearest_pow_of_two,
)

# Search
from .candidate import SearchCandidate
from .ordering import (
    compare_lower_bound,
    compare_upper_bound,
    compare_global,
    compare_local,
    derivative_score,
    eclipses,
    find_eclipsed,
    remove_eclipsed,
)
from .result import GlobalBound, SearchResult
from .search import (
    SearchConfig,
    SearchEngine,
    IterationClock,
    minimize,
)

# Exceptions
from .exceptions import (
    CertMinError,
    PrecisionOverflowError,
    AbortedError,
    DomainError,
)

__all__ = [
    "__version__",
    # Reals
    "Real",
    "to_fraction",
    "to_float",
    "request_abort",
    "clear_abort",
    "abort_requested",
    "PRECISION_LIMIT",
    # Intervals
    "DyadicInterval",
    # Functions
    "FunctionKind",
    "FunctionModulus",
    "OutputTriple",
    "PolynomialTerm",
    "constant",
    "projection",
    "add",
    "multiply",
    "power",
    "polynomial",
    "nearest_pow_of_two",
    # Search
    "SearchCandidate",
    "compare_lower_bound",
    "compare_upper_bound",
    "compare_global",
    "compare_local",
    "derivative_score",
    "eclipses",
    "find_eclipsed",
    "remove_eclipsed",
    "GlobalBound",
    "SearchResult",
    "SearchConfig",
    "SearchEngine",
    "IterationClock",
    "minimize",
    # Exceptions
    "CertMinError",
    "PrecisionOverflowError",
    "AbortedError",
    "DomainError",
]
