"""Unit tests for lasso polygon helpers."""

import pytest

from scanpeople.mapping.points import NormalizedPoint as P
from scanpeople.mapping.points import ViewportSize
from scanpeople.placement.polygon import (
    bounding_box,
    normalize_polygon,
    point_in_polygon,
    polygon_area,
    vertex_centroid,
)

SQUARE = [P(0.1, 0.1), P(0.9, 0.1), P(0.9, 0.9), P(0.1, 0.9)]
# L shape with the top-right quarter missing
L_SHAPE = [P(0.0, 0.0), P(0.5, 0.0), P(0.5, 0.5), P(1.0, 0.5), P(1.0, 1.0), P(0.0, 1.0)]


class TestPointInPolygon:
    """Test suite for the ray casting test."""

    def test_centre_inside(self):
        assert point_in_polygon(0.5, 0.5, SQUARE)

    def test_origin_outside(self):
        assert not point_in_polygon(0.0, 0.0, SQUARE)

    def test_far_points_outside(self):
        """Points beyond every side are outside."""
        for x, y in [(0.95, 0.5), (0.5, 0.95), (0.05, 0.5), (0.5, 0.05)]:
            assert not point_in_polygon(x, y, SQUARE)

    def test_edge_classification(self):
        """The x_min and y_min edges count as inside, the x_max and y_max edges as outside."""
        assert point_in_polygon(0.1, 0.5, SQUARE)
        assert point_in_polygon(0.5, 0.1, SQUARE)
        assert not point_in_polygon(0.9, 0.5, SQUARE)
        assert not point_in_polygon(0.5, 0.9, SQUARE)

    def test_vertex_order_irrelevant(self):
        """Clockwise and counter-clockwise polygons agree."""
        reversed_square = list(reversed(SQUARE))
        for x, y in [(0.5, 0.5), (0.0, 0.0), (0.3, 0.7)]:
            assert point_in_polygon(x, y, SQUARE) == point_in_polygon(x, y, reversed_square)

    def test_concave_notch(self):
        """The missing quarter of an L shape is outside."""
        assert point_in_polygon(0.25, 0.25, L_SHAPE)
        assert point_in_polygon(0.75, 0.75, L_SHAPE)
        assert not point_in_polygon(0.75, 0.25, L_SHAPE)


class TestPolygonGeometry:
    """Test suite for area, bounds and conversions."""

    def test_bounding_box(self):
        assert bounding_box(L_SHAPE) == (0.0, 0.0, 1.0, 1.0)

    def test_bounding_box_empty(self):
        with pytest.raises(ValueError):
            bounding_box([])

    def test_area(self):
        assert polygon_area(SQUARE) == pytest.approx(0.64)
        assert polygon_area(L_SHAPE) == pytest.approx(0.75)
        assert polygon_area([P(0.0, 0.0), P(1.0, 1.0)]) == 0.0

    def test_centroid(self):
        centre = vertex_centroid(SQUARE)
        assert centre.x == pytest.approx(0.5)
        assert centre.y == pytest.approx(0.5)

    def test_normalize_polygon(self):
        """Pixels are converted to viewport fractions."""
        polygon = normalize_polygon([(0, 0), (640, 360), (1280, 720)], ViewportSize(1280, 720))
        assert polygon == [P(0.0, 0.0), P(0.5, 0.5), P(1.0, 1.0)]

    def test_normalize_against_empty_viewport(self):
        with pytest.raises(ValueError):
            normalize_polygon([(1, 1)], ViewportSize(0, 720))
