"""Mapping between world positions and the screen.

This package holds the point types, the forward projection capability
consumed from the viewer and the inverse floor projection used to
place figures from a 2D click.
"""

from .points import Anchor, Intersection, NormalizedPoint, ScreenPoint, ViewportSize, WorldPoint
from .projector import CameraPose, ForwardProjector, PinholeProjector
from .floor_projection import DETERMINANT_THRESHOLD, floor_jacobian, floor_point_from_screen

__all__ = [
    "Anchor",
    "Intersection",
    "NormalizedPoint",
    "ScreenPoint",
    "ViewportSize",
    "WorldPoint",
    "CameraPose",
    "ForwardProjector",
    "PinholeProjector",
    "DETERMINANT_THRESHOLD",
    "floor_jacobian",
    "floor_point_from_screen",
]
