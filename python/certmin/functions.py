# CertMin SDK - Functions with a Modulus of Continuity
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Functions paired with a modulus of continuity.

A ``FunctionModulus`` represents ``f : R^n -> R`` together with a modulus
``m : R^n x R^n -> R`` such that

    |f(y) - f(x)| <= m(x, e)   whenever |y_i - x_i| <= e_i for all i.

Functions are built from a closed set of combinators (constant, projection,
sum, product) and evaluated by a recursive dispatch over the node kind. Trees
are immutable and share sub-trees freely; ``power`` relies on this to keep
its tree logarithmic in the exponent.

The certified operation is ``apply``: given a box of dyadic intervals it
returns an ``OutputTriple`` whose union is guaranteed to contain the image
of the box.

Example:
    >>> x = projection(0)
    >>> f = x * x + constant(1)
    >>> f.evaluate([3])
    Real('10')
    >>> f.apply([DyadicInterval(0, -4)]).contains(1)
    True
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional, Sequence, Union

from .dyadic import DyadicInterval
from .exceptions import DomainError
from .reals import Real, RealLike


class FunctionKind(Enum):
    """Node kinds of a function tree."""
    CONSTANT = "constant"
    PROJECTION = "projection"
    SUM = "sum"
    PRODUCT = "product"


@dataclass(frozen=True)
class OutputTriple:
    """
    Certified enclosure of a function's image over a box.

    The three codes share one precision level q and have consecutive codes
    m-1, m, m+1. The union [lower.lower_edge, upper.upper_edge] contains
    every value the function takes on the box; ``centre`` is the best
    estimate of the value at the box centre.
    """
    lower: DyadicInterval
    centre: DyadicInterval
    upper: DyadicInterval

    @property
    def precision(self) -> int:
        return self.centre.p

    def lower_edge(self):
        return self.lower.lower_edge()

    def upper_edge(self):
        return self.upper.upper_edge()

    def contains(self, value: RealLike) -> bool:
        v = Real(value).to_fraction()
        return self.lower_edge() <= v <= self.upper_edge()

    def __iter__(self):
        return iter((self.lower, self.centre, self.upper))

    def describe(self) -> str:
        digits = self.centre.digits()
        lo = self.lower.go_down(-1).midpoint().to_string(digits)
        hi = self.upper.go_down(+1).midpoint().to_string(digits)
        return f"[{lo},{hi}]"


def nearest_pow_of_two(c: Real) -> int:
    """Least n such that c <= 2^n (c must be positive)."""
    return Real(c).log2_ceil()


def output_precision(bound: Real, intervals: Sequence[DyadicInterval]) -> int:
    """
    Precision level of the output triple for a modulus bound.

    With q = nearest_pow_of_two(bound) + 1 the bound is at most 2^(q-1);
    together with the 2^q approximation error this stays inside the
    triple's reach of 1.5 * 2^q around the centre code. A zero bound
    (constant function) gets one level finer than the finest input.
    """
    if bound.sign() == 0:
        if not intervals:
            return 0
        return min(d.p for d in intervals) - 1
    return nearest_pow_of_two(bound) + 1


@dataclass(frozen=True, eq=False)
class FunctionModulus:
    """
    A function tree node.

    Attributes:
        kind: Which combinator this node is
        value: The constant (CONSTANT only)
        index: The projected coordinate (PROJECTION only)
        left: First operand (SUM and PRODUCT)
        right: Second operand (SUM and PRODUCT)
    """
    kind: FunctionKind
    value: Optional[Real] = None
    index: Optional[int] = None
    left: Optional[FunctionModulus] = None
    right: Optional[FunctionModulus] = None

    # -- evaluation ---------------------------------------------------------

    def _function(self, xs: Sequence[Real], values: dict) -> Real:
        key = id(self)
        cached = values.get(key)
        if cached is not None:
            return cached

        if self.kind == FunctionKind.CONSTANT:
            result = self.value
        elif self.kind == FunctionKind.PROJECTION:
            result = xs[self.index]
        elif self.kind == FunctionKind.SUM:
            result = self.left._function(xs, values) + self.right._function(xs, values)
        else:
            result = self.left._function(xs, values) * self.right._function(xs, values)

        values[key] = result
        return result

    def _modulus(
        self,
        xs: Sequence[Real],
        es: Sequence[Real],
        values: dict,
        moduli: dict,
    ) -> Real:
        key = id(self)
        cached = moduli.get(key)
        if cached is not None:
            return cached

        if self.kind == FunctionKind.CONSTANT:
            result = Real(0)
        elif self.kind == FunctionKind.PROJECTION:
            result = es[self.index]
        elif self.kind == FunctionKind.SUM:
            result = (self.left._modulus(xs, es, values, moduli)
                      + self.right._modulus(xs, es, values, moduli))
        else:
            # |fg(y) - fg(x)| <= |g(x)| m_f + |f(x)| m_g + m_f m_g
            fx = abs(self.left._function(xs, values))
            gx = abs(self.right._function(xs, values))
            mf = self.left._modulus(xs, es, values, moduli)
            mg = self.right._modulus(xs, es, values, moduli)
            result = gx * mf + fx * mg + mf * mg

        moduli[key] = result
        return result

    def evaluate(self, xs: Sequence[RealLike]) -> Real:
        """Exact value f(xs)."""
        return self._function([Real(x) for x in xs], {})

    def modulus(self, xs: Sequence[RealLike], es: Sequence[RealLike]) -> Real:
        """Bound on |f(y) - f(xs)| for |y_i - xs_i| <= es_i."""
        return self._modulus([Real(x) for x in xs], [Real(e) for e in es], {}, {})

    def apply_centre(self, intervals: Sequence[DyadicInterval]) -> Real:
        """Exact value of f at the centre of a box (not a certified bound)."""
        return self._function([d.midpoint() for d in intervals], {})

    def apply(self, intervals: Sequence[DyadicInterval]) -> OutputTriple:
        """
        Certified image of a box of dyadic intervals.

        Raises:
            PrecisionOverflowError: If the modulus demands an unreasonable
                output precision.
            AbortedError: If an abort was requested during evaluation.
        """
        centres = [d.midpoint() for d in intervals]
        widths = [d.half_width() for d in intervals]
        values: dict = {}
        bound = self._modulus(centres, widths, values, {})
        q = output_precision(bound, intervals)
        m = self._function(centres, values).approx(q)
        return OutputTriple(
            lower=DyadicInterval(m - 1, q),
            centre=DyadicInterval(m, q),
            upper=DyadicInterval(m + 1, q),
        )

    # -- structure ----------------------------------------------------------

    def arity(self) -> int:
        """Number of coordinates the function reads (highest index + 1)."""
        if self.kind == FunctionKind.CONSTANT:
            return 0
        if self.kind == FunctionKind.PROJECTION:
            return self.index + 1
        return max(self.left.arity(), self.right.arity())

    def is_constant(self, value: Optional[RealLike] = None) -> bool:
        if self.kind != FunctionKind.CONSTANT:
            return False
        return value is None or self.value == Real(value)

    def partial(self, i: int) -> FunctionModulus:
        """Symbolic partial derivative with respect to coordinate i."""
        if self.kind == FunctionKind.CONSTANT:
            return constant(0)
        if self.kind == FunctionKind.PROJECTION:
            return constant(1 if self.index == i else 0)
        if self.kind == FunctionKind.SUM:
            return _add_simplified(self.left.partial(i), self.right.partial(i))
        return _add_simplified(
            _multiply_simplified(self.left.partial(i), self.right),
            _multiply_simplified(self.left, self.right.partial(i)),
        )

    def gradient(self, dimension_count: int) -> list[FunctionModulus]:
        return [self.partial(i) for i in range(dimension_count)]

    # -- operator sugar -----------------------------------------------------

    def __add__(self, other: Union[FunctionModulus, RealLike]) -> FunctionModulus:
        return add(self, _lift(other))

    def __radd__(self, other: RealLike) -> FunctionModulus:
        return add(_lift(other), self)

    def __mul__(self, other: Union[FunctionModulus, RealLike]) -> FunctionModulus:
        return multiply(self, _lift(other))

    def __rmul__(self, other: RealLike) -> FunctionModulus:
        return multiply(_lift(other), self)

    def __neg__(self) -> FunctionModulus:
        return multiply(constant(-1), self)

    def __sub__(self, other: Union[FunctionModulus, RealLike]) -> FunctionModulus:
        return add(self, -_lift(other))

    def __rsub__(self, other: RealLike) -> FunctionModulus:
        return add(_lift(other), -self)

    def __pow__(self, n: int) -> FunctionModulus:
        return _raise(self, n)

    def __str__(self) -> str:
        if self.kind == FunctionKind.CONSTANT:
            return str(self.value)
        if self.kind == FunctionKind.PROJECTION:
            return f"x{self.index}"
        if self.kind == FunctionKind.SUM:
            return f"({self.left} + {self.right})"
        return f"{self.left}*{self.right}"

    def __repr__(self) -> str:
        return f"FunctionModulus({self})"


# =============================================================================
# Combinators
# =============================================================================

def constant(y: RealLike) -> FunctionModulus:
    """The constant function y, with modulus 0."""
    return FunctionModulus(FunctionKind.CONSTANT, value=Real(y))


def projection(i: int) -> FunctionModulus:
    """The coordinate function xs -> xs[i], with modulus es[i]."""
    if i < 0:
        raise DomainError(f"Projection index must be non-negative, got {i}")
    return FunctionModulus(FunctionKind.PROJECTION, index=i)


def add(f: FunctionModulus, g: FunctionModulus) -> FunctionModulus:
    """Pointwise sum; the moduli add."""
    return FunctionModulus(FunctionKind.SUM, left=f, right=g)


def multiply(f: FunctionModulus, g: FunctionModulus) -> FunctionModulus:
    """Pointwise product; modulus |g| m_f + |f| m_g + m_f m_g."""
    return FunctionModulus(FunctionKind.PRODUCT, left=f, right=g)


def _lift(value: Union[FunctionModulus, RealLike]) -> FunctionModulus:
    if isinstance(value, FunctionModulus):
        return value
    return constant(value)


def _raise(f: FunctionModulus, n: int) -> FunctionModulus:
    """f^n by squaring on the tree; both halves of an even split are shared."""
    if n < 0:
        raise DomainError(f"Exponent must be non-negative, got {n}")
    if n == 0:
        return constant(1)
    if n == 1:
        return f
    half = _raise(f, n // 2)
    if n % 2 == 0:
        return multiply(half, half)
    return multiply(half, multiply(half, f))


@lru_cache(maxsize=None)
def power(i: int, n: int) -> FunctionModulus:
    """
    The monomial xs[i]^n.

    Built by squaring over the combinator tree, with every (i, n) node
    shared, so evaluating x^n touches O(log n) distinct nodes.
    """
    if n < 0:
        raise DomainError(f"Exponent must be non-negative, got {n}")
    if n == 0:
        return constant(1)
    if n == 1:
        return projection(i)
    return multiply(power(i, n // 2), power(i, n - n // 2))


@dataclass(frozen=True)
class PolynomialTerm:
    """One term ``coefficient * x_variable^exponent`` of a polynomial."""
    coefficient: RealLike
    variable: int = 0
    exponent: int = 0

    def derivative(self) -> Optional[PolynomialTerm]:
        """The term's derivative along its own variable, or None if constant."""
        if self.exponent == 0:
            return None
        return PolynomialTerm(
            Real(self.coefficient) * self.exponent,
            self.variable,
            self.exponent - 1,
        )


TermLike = Union[PolynomialTerm, tuple]


def _as_term(term: TermLike) -> PolynomialTerm:
    if isinstance(term, PolynomialTerm):
        return term
    return PolynomialTerm(*term)


def polynomial(terms: Sequence[TermLike]) -> FunctionModulus:
    """
    Sum of scaled monomials.

    Args:
        terms: PolynomialTerm objects or (coefficient, variable, exponent)
               tuples

    Example:
        >>> f = polynomial([(1, 0, 3), (-3, 0, 1)])   # x^3 - 3x
        >>> f.evaluate([2])
        Real('2')
    """
    result: Optional[FunctionModulus] = None
    for raw in terms:
        term = _as_term(raw)
        monomial = multiply(constant(term.coefficient), power(term.variable, term.exponent))
        result = monomial if result is None else add(result, monomial)
    return result if result is not None else constant(0)


def _add_simplified(f: FunctionModulus, g: FunctionModulus) -> FunctionModulus:
    if f.is_constant(0):
        return g
    if g.is_constant(0):
        return f
    if f.is_constant() and g.is_constant():
        return constant(f.value + g.value)
    return add(f, g)


def _multiply_simplified(f: FunctionModulus, g: FunctionModulus) -> FunctionModulus:
    if f.is_constant(0) or g.is_constant(0):
        return constant(0)
    if f.is_constant(1):
        return g
    if g.is_constant(1):
        return f
    if f.is_constant() and g.is_constant():
        return constant(f.value * g.value)
    return multiply(f, g)
