# CertMin SDK - Function Modulus Tests
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Tests for functions with a modulus of continuity.

Test Categories:
1. Combinators - constant, projection, sum, product, power, polynomial
2. Modulus Soundness - property-based checks of the modulus bounds
3. Certified Application - apply() encloses the image of a box
4. Derivatives - symbolic partial derivatives
"""

import pytest
import numpy as np
from fractions import Fraction

from certmin.dyadic import DyadicInterval
from certmin.exceptions import DomainError
from certmin.functions import (
    FunctionKind,
    PolynomialTerm,
    add,
    constant,
    multiply,
    nearest_pow_of_two,
    polynomial,
    power,
    projection,
)
from certmin.reals import Real, pow2


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def rng():
    return np.random.default_rng(20240101)


@pytest.fixture
def cubic():
    """x^3 - 3x."""
    return polynomial([(1, 0, 3), (-3, 0, 1)])


def _count_nodes(f):
    seen = set()
    stack = [f]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        if node.left is not None:
            stack.append(node.left)
        if node.right is not None:
            stack.append(node.right)
    return len(seen)


def _sample_in(interval, rng):
    lo, hi = interval.lower_edge(), interval.upper_edge()
    return lo + (hi - lo) * Fraction(int(rng.integers(0, 1001)), 1000)


# =============================================================================
# 1. Combinators
# =============================================================================

class TestCombinators:
    def test_constant(self):
        f = constant(5)
        assert f.kind == FunctionKind.CONSTANT
        assert f.evaluate([1]) == 5
        assert f.modulus([1], [100]) == 0

    def test_projection(self):
        f = projection(1)
        assert f.evaluate([1, 2]) == 2
        assert f.modulus([1, 2], [Fraction(1, 2), Fraction(1, 4)]) == Fraction(1, 4)

    def test_negative_projection_rejected(self):
        with pytest.raises(DomainError):
            projection(-1)

    def test_sum_adds_moduli(self):
        f = add(projection(0), projection(1))
        assert f.evaluate([3, 4]) == 7
        assert f.modulus([0, 0], [1, 2]) == 3

    def test_product_modulus_formula(self):
        f = projection(0) + 1
        g = projection(0)
        h = multiply(f, g)
        # |g| m_f + |f| m_g + m_f m_g = 2/2 + 3/2 + 1/4
        assert h.modulus([2], [Fraction(1, 2)]) == Fraction(11, 4)
        assert h.evaluate([2]) == 6

    def test_power_values(self):
        assert power(0, 5).evaluate([2]) == 32
        assert power(0, 0).evaluate([7]) == 1
        assert power(0, 1).kind == FunctionKind.PROJECTION
        assert power(1, 3).evaluate([5, -2]) == -8

    def test_power_square_modulus(self):
        assert power(0, 2).modulus([0], [Fraction(1, 8)]) == Fraction(1, 64)

    def test_negative_power_rejected(self):
        with pytest.raises(DomainError):
            power(0, -1)
        with pytest.raises(DomainError):
            projection(0) ** -2

    def test_power_tree_is_logarithmic(self):
        assert _count_nodes(power(0, 1024)) == 11
        assert _count_nodes(power(0, 1000)) < 24
        assert _count_nodes(projection(0) ** 1000) < 40

    def test_polynomial(self, cubic):
        assert cubic.evaluate([2]) == 2
        assert cubic.evaluate([1]) == -2
        assert cubic.evaluate([-4]) == -52

    def test_polynomial_terms_and_floats(self):
        f = polynomial([PolynomialTerm(0.5, 0, 2), PolynomialTerm(Fraction(1, 3), 1, 1)])
        assert f.evaluate([2, 3]) == 3

    def test_empty_polynomial(self):
        assert polynomial([]).evaluate([5]) == 0

    def test_operator_sugar(self):
        x = projection(0)
        assert (2 - x).evaluate([5]) == -3
        assert (-x).evaluate([5]) == -5
        assert (x * x + 3 * x + 1).evaluate([2]) == 11
        assert (x ** 3).evaluate([3]) == 27

    def test_arity(self):
        x, y = projection(0), projection(1)
        assert (x ** 2 * y).arity() == 2
        assert constant(1).arity() == 0
        assert projection(4).arity() == 5

    def test_nearest_pow_of_two(self):
        assert nearest_pow_of_two(Real(5)) == 3
        assert nearest_pow_of_two(Real(8)) == 3
        assert nearest_pow_of_two(Real(Fraction(1, 8))) == -3


# =============================================================================
# 2. Modulus Soundness
# =============================================================================

class TestModulusSoundness:
    def test_product_modulus_is_sound(self, rng):
        x, y = projection(0), projection(1)
        f = x * y + 2
        g = x ** 2 - y
        h = multiply(f, g)

        for _ in range(1000):
            centre = [Fraction(int(rng.integers(-64, 65)), 16) for _ in range(2)]
            widths = [pow2(int(rng.integers(-8, 3))) for _ in range(2)]
            point = [
                c + e * Fraction(int(rng.integers(-100, 101)), 100)
                for c, e in zip(centre, widths)
            ]
            change = abs(h.evaluate(point) - h.evaluate(centre))
            assert change <= h.modulus(centre, widths)

    def test_polynomial_modulus_is_sound(self, cubic, rng):
        for _ in range(300):
            c = Fraction(int(rng.integers(-400, 401)), 100)
            e = pow2(int(rng.integers(-10, 2)))
            y = c + e * Fraction(int(rng.integers(-100, 101)), 100)
            assert abs(cubic.evaluate([y]) - cubic.evaluate([c])) <= cubic.modulus([c], [e])


# =============================================================================
# 3. Certified Application
# =============================================================================

class TestApply:
    def test_triple_shape(self, cubic):
        triple = cubic.apply([DyadicInterval(3, -2)])
        assert triple.lower.p == triple.centre.p == triple.upper.p
        assert triple.lower.k == triple.centre.k - 1
        assert triple.upper.k == triple.centre.k + 1

    def test_root_box_precision(self):
        # x^2 on [-4, 4]: modulus 16, so the output level is 5
        triple = power(0, 2).apply([DyadicInterval(0, 3)])
        assert triple.precision == 5
        assert triple.centre.k == 0

    def test_constant_output_level(self):
        triple = constant(3).apply([DyadicInterval(0, 2)])
        assert triple.precision == 1
        assert triple.contains(3)

    def test_encloses_image(self, cubic, rng):
        for _ in range(200):
            p = int(rng.integers(-8, 3))
            k = int(rng.integers(-(2 ** max(0, 2 - p)), 2 ** max(0, 2 - p) + 1))
            box = DyadicInterval(k, p)
            triple = cubic.apply([box])
            for _ in range(5):
                y = _sample_in(box, rng)
                assert triple.contains(cubic.evaluate([y]))

    def test_encloses_image_multivariate(self, rng):
        x, y = projection(0), projection(1)
        f = x ** 2 * y - 3 * y + x
        for _ in range(100):
            box = [DyadicInterval(int(rng.integers(-8, 9)), int(rng.integers(-4, 1)))
                   for _ in range(2)]
            triple = f.apply(box)
            point = [_sample_in(d, rng) for d in box]
            assert triple.contains(f.evaluate(point))

    def test_apply_centre(self, cubic):
        assert cubic.apply_centre([DyadicInterval(1, 0)]) == -2

    def test_describe(self):
        triple = constant(0).apply([DyadicInterval(0, 1)])
        # level 0, codes -1, 0, 1
        assert triple.describe() == "[-1.5,1.5]"


# =============================================================================
# 4. Derivatives
# =============================================================================

class TestPartial:
    def test_partials(self):
        x, y = projection(0), projection(1)
        f = x ** 2 * y + 3 * x
        assert f.partial(0).evaluate([2, 5]) == 23
        assert f.partial(1).evaluate([2, 5]) == 4

    def test_polynomial_derivative(self, cubic):
        d = cubic.partial(0)
        assert d.evaluate([1]) == 0
        assert d.evaluate([2]) == 9

    def test_constant_partial_simplifies(self):
        assert constant(7).partial(0).is_constant(0)
        assert projection(1).partial(0).is_constant(0)
        assert projection(1).partial(1).is_constant(1)

    def test_gradient(self):
        x, y = projection(0), projection(1)
        grad = (x * y).gradient(2)
        assert [g.evaluate([3, 4]) for g in grad] == [4, 3]

    def test_term_derivative(self):
        term = PolynomialTerm(-3, 0, 2)
        assert term.derivative() == PolynomialTerm(Real(-6), 0, 1)
        assert PolynomialTerm(4, 0, 0).derivative() is None
