"""Unit tests for geometry module."""

import pytest

from planemesh.geometry import (
    BoundingBox,
    compare_xy,
    cross_product_2d,
    eval_line_at_x,
    intersect_lines,
    is_left_of_line,
    is_right_of_line,
    normalized,
    perp_ccw,
    reflect_point,
    signed_area,
    triangle_area,
)


class TestBoundingBox:
    """Tests for BoundingBox class."""

    def test_contains(self):
        """Test point containment, boundary included."""
        bbox = BoundingBox(0, 0, 10, 10)
        assert bbox.contains(5, 5)
        assert bbox.contains(10, 0)
        assert not bbox.contains(-1, 5)

    def test_from_points(self):
        """Test box around a point set."""
        bbox = BoundingBox.from_points([(1, 2), (-3, 5), (4, -1)])
        assert (bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y) == (-3, -1, 4, 5)

    def test_from_no_points(self):
        """Test empty point set gives a degenerate box."""
        assert BoundingBox.from_points([]) == BoundingBox(0, 0, 0, 0)


class TestVectorHelpers:
    """Tests for the small vector helpers."""

    def test_normalized(self):
        """Test unit vector."""
        n = normalized((3, 4))
        assert n[0] == pytest.approx(0.6)
        assert n[1] == pytest.approx(0.8)

    def test_normalized_zero(self):
        """Test zero vector stays zero."""
        assert normalized((0, 0)) == (0.0, 0.0)

    def test_perp_ccw(self):
        """Test +90 degree rotation."""
        assert perp_ccw((1, 0)) == (0, 1)
        assert perp_ccw((0, 1)) == (-1, 0)

    def test_cross_product_sign(self):
        """Test cross product sign follows turn direction."""
        assert cross_product_2d((0, 0), (1, 0), (0, 1)) > 0
        assert cross_product_2d((0, 0), (0, 1), (1, 0)) < 0


class TestOrientation:
    """Tests for left/right of line predicates."""

    def test_left_of_line(self):
        """Test point above a rightward line is on its left."""
        assert is_left_of_line((0.5, 1), (0, 0), (1, 0))
        assert not is_right_of_line((0.5, 1), (0, 0), (1, 0))

    def test_right_of_line(self):
        """Test point below a rightward line is on its right."""
        assert is_right_of_line((0.5, -1), (0, 0), (1, 0))
        assert not is_left_of_line((0.5, -1), (0, 0), (1, 0))

    def test_collinear_is_neither(self):
        """Test collinear point is neither left nor right."""
        assert not is_left_of_line((2, 0), (0, 0), (1, 0))
        assert not is_right_of_line((2, 0), (0, 0), (1, 0))


class TestCompareXY:
    """Tests for the sweep order."""

    def test_x_first(self):
        """Test x decides when different."""
        assert compare_xy((0, 5), (1, 0)) == -1
        assert compare_xy((1, 0), (0, 5)) == 1

    def test_y_breaks_ties(self):
        """Test y decides when x is equal."""
        assert compare_xy((1, 0), (1, 2)) == -1
        assert compare_xy((1, 2), (1, 0)) == 1

    def test_equal(self):
        """Test identical points compare equal."""
        assert compare_xy((1, 2), (1, 2)) == 0


class TestLines:
    """Tests for line intersection, evaluation and reflection."""

    def test_intersect(self):
        """Test crossing diagonals."""
        p = intersect_lines((0, 0), (2, 2), (0, 2), (2, 0))
        assert p[0] == pytest.approx(1)
        assert p[1] == pytest.approx(1)

    def test_intersect_parallel(self):
        """Test parallel lines have no intersection."""
        assert intersect_lines((0, 0), (1, 0), (0, 1), (1, 1)) is None

    def test_eval_line_at_x(self):
        """Test interpolation and extrapolation."""
        assert eval_line_at_x((0, 0), (2, 4), 1) == pytest.approx(2)
        assert eval_line_at_x((0, 0), (2, 4), 3) == pytest.approx(6)

    def test_eval_vertical_line(self):
        """Test vertical segment reports its upper end."""
        assert eval_line_at_x((1, 0), (1, 3), 1) == 3
        assert eval_line_at_x((1, 3), (1, 0), 1) == 3

    def test_reflect_point_vertical_axis(self):
        """Test mirroring across the y axis."""
        p = reflect_point((2, 3), (0, 0), (0, 1))
        assert p[0] == pytest.approx(-2)
        assert p[1] == pytest.approx(3)

    def test_reflect_point_diagonal(self):
        """Test mirroring across y = x swaps coordinates."""
        p = reflect_point((1, 0), (0, 0), (1, 1))
        assert p[0] == pytest.approx(0)
        assert p[1] == pytest.approx(1)


class TestAreas:
    """Tests for area helpers."""

    def test_signed_area_ccw(self):
        """Test CCW square has positive area."""
        assert signed_area([(0, 0), (2, 0), (2, 2), (0, 2)]) == pytest.approx(4)

    def test_signed_area_cw(self):
        """Test CW square has negative area."""
        assert signed_area([(0, 0), (0, 2), (2, 2), (2, 0)]) == pytest.approx(-4)

    def test_signed_area_degenerate(self):
        """Test fewer than three points has no area."""
        assert signed_area([(0, 0), (1, 1)]) == 0.0

    def test_triangle_area(self):
        """Test signed triangle area."""
        assert triangle_area((0, 0), (1, 0), (0, 1)) == pytest.approx(0.5)
        assert triangle_area((0, 0), (0, 1), (1, 0)) == pytest.approx(-0.5)
