# CertMin SDK - Search Candidate Tests
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""
Tests for search candidates.

Test Categories:
1. Construction - root candidate, certified output, derivative values
2. Branching - per-dimension and full refinement, domain clipping
3. Identity - keys and history membership
"""

import pytest
import numpy as np

from certmin.candidate import SearchCandidate
from certmin.dyadic import DyadicInterval
from certmin.functions import constant, polynomial, projection


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def square():
    """x^2 with its derivative 2x."""
    x = projection(0)
    return x * x, [2 * x]


@pytest.fixture
def root(square):
    f, df = square
    return SearchCandidate.initial(f, df, 1, 3)


@pytest.fixture
def plane():
    """x^2 + xy with its gradient, on [-2, 2]^2."""
    x, y = projection(0), projection(1)
    f = x * x + x * y
    return SearchCandidate.initial(f, f.gradient(2), 2, 2)


# =============================================================================
# 1. Construction
# =============================================================================

class TestConstruction:
    def test_initial_box(self, root):
        assert root.inputs == (DyadicInterval(0, 3),)
        assert root.initials == root.inputs
        assert root.dimension_count == 1

    def test_output_encloses_image(self, root):
        lo, hi = root.output.lower_edge(), root.output.upper_edge()
        assert lo <= 0
        assert hi >= 16

    def test_derivatives_at_centre(self, square):
        f, df = square
        box = SearchCandidate([DyadicInterval(0, 3)], [DyadicInterval(-2, 1)], f, df)
        assert box.centre() == (-4,)
        np.testing.assert_array_equal(box.derivatives, np.array([-8.0]))
        assert box.derivative_score() == 8.0

    def test_huge_derivatives_saturate(self, square):
        f, df = square
        box = SearchCandidate(
            [DyadicInterval(0, 1102)], [DyadicInterval(-1, 1100)], f, df
        )
        assert box.derivatives[0] == -np.inf
        assert box.derivative_score() == np.inf
        assert box.steepest_dimension() == 0
        # the certified output stays exact
        assert box.output.contains(2 ** 2200)

    def test_no_derivatives(self):
        box = SearchCandidate.initial(constant(2), [], 1, 1)
        assert box.derivatives.size == 0
        assert box.derivative_score() == 0.0
        assert box.steepest_dimension() == 0

    def test_steepest_dimension(self):
        x, y = projection(0), projection(1)
        f = x + 5 * y
        box = SearchCandidate.initial(f, f.gradient(2), 2, 1)
        np.testing.assert_array_equal(box.abs_derivatives(), np.array([1.0, 5.0]))
        assert box.steepest_dimension() == 1

    def test_describe(self, root):
        assert root.describe().startswith("f([-4,4]) ==> [")
        assert "SearchCandidate" in repr(root)


# =============================================================================
# 2. Branching
# =============================================================================

class TestBranching:
    def test_root_gives_three_children(self, root):
        children = root.branch_along_dimension(0)
        assert [c.inputs[0].key() for c in children] == [(-1, 2), (0, 2), (1, 2)]
        assert all(c.initials == root.initials for c in children)

    def test_boundary_box_is_clipped(self, square):
        f, df = square
        box = SearchCandidate([DyadicInterval(0, 3)], [DyadicInterval(-1, 2)], f, df)
        children = box.branch_along_dimension(0)
        assert [c.inputs[0].key() for c in children] == [(-2, 1), (-1, 1)]

    def test_children_are_centred_in_domain(self, square):
        f, df = square
        frontier = [SearchCandidate.initial(f, df, 1, 2)]
        for _ in range(4):
            frontier = [c for box in frontier for c in box.branch_along_dimension(0)]
        domain = DyadicInterval(0, 2)
        assert all(domain.contains(c.inputs[0].midpoint()) for c in frontier)

    def test_other_dimensions_unchanged(self, plane):
        children = plane.branch_along_dimension(1)
        assert len(children) == 3
        assert all(c.inputs[0] == plane.inputs[0] for c in children)
        assert [c.inputs[1].p for c in children] == [1, 1, 1]

    def test_branch_all(self, plane):
        children = plane.branch_all()
        assert len(children) == 9
        assert len({c.key() for c in children}) == 9

    def test_children_recompute_output(self, root):
        left, middle, right = root.branch_along_dimension(0)
        # modulus 4 at the centre, 20 at the sides
        assert middle.output.precision == 3
        assert left.output.precision == right.output.precision == 6


# =============================================================================
# 3. Identity
# =============================================================================

class TestIdentity:
    def test_key(self, root):
        assert root.key() == ((0, 3),)

    def test_same_as(self, root):
        a = root.branch_along_dimension(0)[1]
        b = root.branch_along_dimension(0)[1]
        assert a is not b
        assert a.same_as(b)
        assert not a.same_as(root)

    def test_already_in(self, root):
        history = {root.key()}
        assert root.already_in(history)
        assert not root.branch_along_dimension(0)[0].already_in(history)
