"""
Unit tests for core geometry module.
"""

import numpy as np
import pytest
from shapely.geometry import Polygon, MultiPolygon

from hyperoverlap.core.geometry import (
    EPS,
    ellipse_radius,
    ellipse_polygon,
    polygon_area,
    ensure_ccw,
    shapely_to_numpy,
    projected_overlap,
)


class TestPolygonArea:
    """Tests for polygon_area() function."""

    def test_unit_square(self):
        """Unit square should have area 1."""
        square = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
        assert abs(polygon_area(square) - 1.0) < EPS

    def test_degenerate_polygon(self):
        """Polygon with < 3 vertices should have area 0."""
        line = np.array([[0, 0], [1, 1]], dtype=float)
        assert polygon_area(line) == 0.0

    def test_order_invariant(self):
        """Area should be same regardless of vertex order (CCW vs CW)."""
        ccw_square = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
        cw_square = ccw_square[::-1]
        assert abs(polygon_area(ccw_square) - polygon_area(cw_square)) < EPS


class TestEnsureCCW:
    """Tests for ensure_ccw() function."""

    def test_ccw_unchanged(self):
        """CCW polygon should remain unchanged."""
        ccw_square = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
        np.testing.assert_array_almost_equal(ensure_ccw(ccw_square), ccw_square)

    def test_cw_reversed(self):
        """CW polygon should be reversed to CCW."""
        cw_square = np.array([[0, 0], [0, 1], [1, 1], [1, 0]], dtype=float)
        np.testing.assert_array_almost_equal(ensure_ccw(cw_square), cw_square[::-1])


class TestShapelyToNumpy:
    """Tests for shapely_to_numpy() function."""

    def test_removes_closing_vertex(self):
        """Should remove the duplicate closing vertex."""
        result = shapely_to_numpy(Polygon([(0, 0), (1, 0), (1, 1), (0, 1)]))
        assert result.shape == (4, 2)

    def test_largest_of_multipolygon(self):
        """MultiPolygons give their largest part."""
        small = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
        large = Polygon([(5, 5), (8, 5), (8, 8), (5, 8)])
        result = shapely_to_numpy(MultiPolygon([small, large]))
        assert abs(polygon_area(result) - 9.0) < EPS

    def test_empty_geometry(self):
        """Empty geometries give no vertices."""
        assert shapely_to_numpy(Polygon()).shape == (0, 2)


class TestEllipse:
    """Tests for ellipse_radius() and ellipse_polygon()."""

    def test_chi2_radius(self):
        """Without a sample size the radius is the chi-square quantile."""
        assert ellipse_radius(0.95) == pytest.approx(np.sqrt(5.991465), rel=1e-5)

    def test_f_radius_approaches_chi2(self):
        """The F-based radius shrinks towards the chi-square one."""
        small = ellipse_radius(0.95, n_obs=10)
        large = ellipse_radius(0.95, n_obs=100000)

        assert small > large
        assert large == pytest.approx(ellipse_radius(0.95), rel=1e-3)

    def test_invalid_level(self):
        """Levels outside (0, 1) are rejected."""
        with pytest.raises(ValueError):
            ellipse_radius(1.0)

    def test_area(self):
        """Polygon area approaches pi * r^2 * sqrt(det S)."""
        shape = np.array([[4.0, 1.0], [1.0, 2.0]])
        poly = ellipse_polygon(np.array([1.0, -1.0]), shape, radius=2.0, n_vertices=400)
        expected = np.pi * 4.0 * np.sqrt(np.linalg.det(shape))
        assert polygon_area(poly) == pytest.approx(expected, rel=1e-3)

    def test_vertices_on_boundary(self):
        """Every vertex has Mahalanobis radius r."""
        shape = np.array([[3.0, -0.5], [-0.5, 1.0]])
        center = np.array([2.0, 3.0])
        poly = ellipse_polygon(center, shape, radius=1.5)

        diff = poly - center
        dist = np.sqrt(np.einsum('ij,jk,ik->i', diff, np.linalg.inv(shape), diff))
        np.testing.assert_allclose(dist, 1.5, rtol=1e-8)

    def test_counter_clockwise(self):
        """Ellipse vertices come out counter-clockwise."""
        poly = ellipse_polygon(np.zeros(2), np.eye(2))
        np.testing.assert_array_equal(ensure_ccw(poly), poly)

    def test_degenerate_shape(self):
        """A singular shape collapses to a zero-area segment."""
        poly = ellipse_polygon(np.zeros(2), np.array([[1.0, 1.0], [1.0, 1.0]]))
        assert polygon_area(poly) < 1e-8

    def test_wrong_shape(self):
        """Only 2D ellipses are supported."""
        with pytest.raises(ValueError):
            ellipse_polygon(np.zeros(3), np.eye(3))


class TestProjectedOverlap:
    """Tests for projected_overlap() function."""

    def test_identical(self):
        """Identical polygons overlap completely."""
        poly = ellipse_polygon(np.zeros(2), np.eye(2))
        stats = projected_overlap(poly, poly)

        assert stats['jaccard'] == pytest.approx(1.0)
        assert stats['intersection_area'] == pytest.approx(stats['area1'])

    def test_disjoint(self):
        """Separated polygons do not overlap."""
        poly1 = ellipse_polygon(np.zeros(2), np.eye(2))
        poly2 = ellipse_polygon(np.array([10.0, 10.0]), np.eye(2))
        stats = projected_overlap(poly1, poly2)

        assert stats['jaccard'] == 0.0
        assert stats['intersection'].shape == (0, 2)

    def test_half_overlapping_squares(self):
        """Unit squares shifted by half share a third of their union."""
        sq1 = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
        sq2 = sq1 + [0.5, 0.0]
        stats = projected_overlap(sq1, sq2)

        assert stats['intersection_area'] == pytest.approx(0.5)
        assert stats['jaccard'] == pytest.approx(0.5 / 1.5)
        assert polygon_area(stats['intersection']) == pytest.approx(0.5)

    def test_ellipse_areas(self):
        """Reported areas are the ellipse areas, matching shapely's."""
        shape = np.array([[2.0, 0.5], [0.5, 1.0]])
        poly1 = ellipse_polygon(np.zeros(2), shape, radius=2.0, n_vertices=2000)
        poly2 = ellipse_polygon(np.ones(2), np.eye(2), n_vertices=2000)
        stats = projected_overlap(poly1, poly2)

        expected = np.pi * 4.0 * np.sqrt(np.linalg.det(shape))
        assert stats['area1'] == pytest.approx(expected, rel=1e-3)
        assert stats['area1'] == pytest.approx(Polygon(poly1).area)
        assert stats['area2'] == pytest.approx(np.pi, rel=1e-3)

    def test_degenerate_input(self):
        """Polygons with fewer than three vertices have no area."""
        stats = projected_overlap(np.zeros((2, 2)), np.zeros((2, 2)))
        assert stats['jaccard'] == 0.0
