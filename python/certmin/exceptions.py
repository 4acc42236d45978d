# CertMin SDK - Exceptions
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Exception hierarchy for CertMin.

Engine failures (precision overflow, aborted computation) are never
recovered locally: they propagate out of ``SearchEngine.search()`` and end
that search. Malformed requests are rejected up front with ``DomainError``.
"""


class CertMinError(Exception):
    """Base class for all CertMin errors."""


class PrecisionOverflowError(CertMinError):
    """
    An approximation was requested at a precision beyond the bit budget.

    This is usually a symptom of a diverging computation, e.g. a modulus
    that does not shrink or a function that blows up on the domain.
    """

    def __init__(self, precision: int, limit: int):
        self.precision = precision
        self.limit = limit
        super().__init__(
            f"Requested precision 2^{precision} exceeds the limit of {limit} bits"
        )


class AbortedError(CertMinError):
    """A real-number computation was interrupted by an abort request."""


class DomainError(CertMinError, ValueError):
    """The search domain or configuration is malformed."""
