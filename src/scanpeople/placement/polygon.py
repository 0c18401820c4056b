"""Polygon helpers for lasso selections.

Polygons are sequences of `NormalizedPoint` and are implicitly closed:
the last vertex connects back to the first.

`point_in_polygon` uses the even-odd ray casting rule with a
half-open edge convention.  A point on an ``x_min`` or ``y_min``
edge counts as inside and a point on an ``x_max`` or ``y_max`` edge
counts as outside (with screen y growing downwards, ``y_min`` is the
top of the shape), so two polygons that share an edge never both
claim a point on it.
"""

from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..mapping.points import NormalizedPoint, ViewportSize

MIN_VERTICES = 3


def bounding_box(polygon: Sequence[NormalizedPoint]) -> Tuple[float, float, float, float]:
    """Axis-aligned bounds as ``(x_min, y_min, x_max, y_max)``."""
    if not polygon:
        raise ValueError("polygon has no vertices")
    xs = [p.x for p in polygon]
    ys = [p.y for p in polygon]
    return (min(xs), min(ys), max(xs), max(ys))


def point_in_polygon(x: float, y: float, polygon: Sequence[NormalizedPoint]) -> bool:
    """Return True if ``(x, y)`` lies inside ``polygon``.

    A horizontal ray is cast from the point towards +X and the edges
    it crosses are counted; an odd count means inside.
    """
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def polygon_area(polygon: Sequence[NormalizedPoint]) -> float:
    """Unsigned shoelace area."""
    if len(polygon) < MIN_VERTICES:
        return 0.0
    xs = np.array([p.x for p in polygon])
    ys = np.array([p.y for p in polygon])
    return float(abs(np.dot(xs, np.roll(ys, -1)) - np.dot(ys, np.roll(xs, -1))) / 2.0)


def vertex_centroid(polygon: Sequence[NormalizedPoint]) -> NormalizedPoint:
    """Mean of the vertices, used to place the lasso label."""
    if not polygon:
        raise ValueError("polygon has no vertices")
    xs = np.mean([p.x for p in polygon])
    ys = np.mean([p.y for p in polygon])
    return NormalizedPoint(float(xs), float(ys))


def normalize_polygon(pixels: Iterable[Tuple[float, float]], viewport: ViewportSize) -> List[NormalizedPoint]:
    """Convert lasso pixels into viewport fractions."""
    return [viewport.to_normalized(x, y) for x, y in pixels]
