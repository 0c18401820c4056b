"""Placement of figures: lasso geometry, sampling, roles and placers."""

from .polygon import (
    MIN_VERTICES,
    bounding_box,
    normalize_polygon,
    point_in_polygon,
    polygon_area,
    vertex_centroid,
)
from .sampler import RegionSampler, jittered_random
from .roles import (
    MIXED,
    MIXED_WEIGHTS,
    ROLES,
    SINGLE_ROLES,
    Appearance,
    random_appearance,
    resolve_role,
    role_colors,
    weighted_random_role,
)
from .placer import Placement, Placer

__all__ = [
    "MIN_VERTICES",
    "bounding_box",
    "normalize_polygon",
    "point_in_polygon",
    "polygon_area",
    "vertex_centroid",
    "RegionSampler",
    "jittered_random",
    "MIXED",
    "MIXED_WEIGHTS",
    "ROLES",
    "SINGLE_ROLES",
    "Appearance",
    "random_appearance",
    "resolve_role",
    "role_colors",
    "weighted_random_role",
    "Placement",
    "Placer",
]
