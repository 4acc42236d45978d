# CertMin SDK - Command Line Driver
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Interactive driver: minimize a polynomial in one variable.

Prompts for the degree, the coefficients (highest power first), the domain
exponent n of [-2^n, 2^n] and the number of seconds to run, then prints the
certified global bound and the local estimate.

Set CERTMIN_LOG_LEVEL (e.g. INFO or DEBUG) to see search progress.
"""

from __future__ import annotations
from fractions import Fraction
from typing import Callable
import logging
import os

from .exceptions import CertMinError
from .functions import PolynomialTerm, polynomial
from .reals import to_fraction
from .search import SearchEngine
from .dyadic import DyadicInterval


logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


def _configure_logging() -> None:
    level = os.environ.get("CERTMIN_LOG_LEVEL")
    if not level:
        return
    pkg_logger = logging.getLogger("certmin")
    pkg_logger.setLevel(level.upper())
    if not pkg_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        pkg_logger.addHandler(handler)


def _format_coefficient(c: Fraction) -> str:
    if c.denominator == 1:
        return str(c.numerator)
    return f"({c})"


def format_polynomial(terms: list[PolynomialTerm]) -> str:
    """Render terms as e.g. ``1x^3 + -3x``."""
    if not terms:
        return "0"
    parts = []
    for term in terms:
        coefficient = _format_coefficient(to_fraction(term.coefficient))
        if term.exponent > 1:
            parts.append(f"{coefficient}x^{term.exponent}")
        elif term.exponent == 1:
            parts.append(f"{coefficient}x")
        else:
            parts.append(coefficient)
    return " + ".join(parts)


def read_polynomial(prompt: Prompt = input) -> list[PolynomialTerm]:
    """Ask for the degree and coefficients; zero coefficients are skipped."""
    degree = int(prompt("Enter degree of polynomial: "))
    if degree < 0:
        raise ValueError(f"Degree must be non-negative, got {degree}")
    terms = []
    for i in range(degree, -1, -1):
        coefficient = to_fraction(prompt(f"Enter parameter 'a' for term 'ax^{i}': ").strip())
        if coefficient != 0:
            terms.append(PolynomialTerm(coefficient, 0, i))
    return terms


def main(prompt: Prompt = input, out: Callable[[str], None] = print) -> int:
    _configure_logging()
    try:
        terms = read_polynomial(prompt)
        out(f"Chosen polynomial: {format_polynomial(terms)}")
        n = int(prompt("Enter 'n' value of starting interval [-2^n,2^n]: "))
        seconds = float(prompt("Enter number of seconds to run for: "))
    except (ValueError, ZeroDivisionError) as e:
        out(f"error: {e}")
        return 1

    function = polynomial(terms)
    derivative = polynomial([d for d in (t.derivative() for t in terms) if d is not None])

    try:
        engine = SearchEngine(
            function, [derivative], 1, DyadicInterval.from_domain(n).p, seconds
        )
        result = engine.search()
    except CertMinError as e:
        logger.error("Search failed: %s", e)
        out(f"error: {e}")
        return 1

    out("")
    out(f"Global search result: {result.global_bound}")
    point, value = result.local_estimate
    out(f"Local search estimate: f({point}) ==> {value}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
