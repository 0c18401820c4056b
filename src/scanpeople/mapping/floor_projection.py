"""Inverse projection from the screen onto a horizontal floor plane.

The viewer only offers a forward projection, so a click on the screen
is promoted to a world position by linearising that projection around
a known floor point.  The reference point and two points one unit away
along world X and world Z are projected; the screen displacements give
the local 2×2 Jacobian (pixels per world unit) of the floor plane.
Inverting it maps a pixel offset from the reference back to a floor
offset, and the height of the reference is kept.

Known limitation: the projection is treated as locally affine.  The
error grows with the distance from the reference point and with
grazing camera angles, and it is not corrected for wide lassos or
strongly distorted projections.
"""

from typing import Optional, Tuple

import numpy as np

from ..utils.logging import get_logger
from .points import ScreenPoint, ViewportSize, WorldPoint
from .projector import ForwardProjector

logger = get_logger(__name__)

DETERMINANT_THRESHOLD = 1e-3
"""Below this the camera is nearly edge-on to the floor and the inversion is refused."""


def floor_jacobian(
    projector: ForwardProjector,
    reference: WorldPoint,
    pose,
    viewport: ViewportSize,
) -> Optional[Tuple[ScreenPoint, np.ndarray]]:
    """Finite-difference Jacobian of the floor plane around ``reference``.

    Returns
    -------
    (ScreenPoint, numpy.ndarray) or None
        The projected reference point and the 2×2 matrix whose columns
        are the screen displacements for +1 along world X and world Z.
        ``None`` if any of the three projections is unavailable or lies
        behind the camera.
    """
    ref_screen = projector.forward_project(reference, pose, viewport)
    plus_x = projector.forward_project(reference.offset(dx=1.0), pose, viewport)
    plus_z = projector.forward_project(reference.offset(dz=1.0), pose, viewport)
    projected = (ref_screen, plus_x, plus_z)
    if any(p is None or not p.visible for p in projected):
        return None
    jacobian = np.array([
        [plus_x.x - ref_screen.x, plus_z.x - ref_screen.x],
        [plus_x.y - ref_screen.y, plus_z.y - ref_screen.y],
    ])
    return ref_screen, jacobian


def floor_point_from_screen(
    screen_x: float,
    screen_y: float,
    reference: WorldPoint,
    pose,
    viewport: ViewportSize,
    projector: ForwardProjector,
    determinant_threshold: float = DETERMINANT_THRESHOLD,
) -> Optional[WorldPoint]:
    """Recover the floor point under a screen pixel.

    Parameters
    ----------
    screen_x, screen_y : float
        Target pixel position.
    reference : WorldPoint
        A point believed to lie on the same floor, usually the viewer's
        last hover intersection.
    pose
        Current camera pose, passed through to ``projector``.
    viewport : ViewportSize
        Viewer size in pixels.
    projector : ForwardProjector
        The viewer's forward projection.
    determinant_threshold : float, optional
        Minimum magnitude of the Jacobian determinant.

    Returns
    -------
    WorldPoint or None
        The floor point at the reference height, or ``None`` when the
        mapping cannot be inverted.  Callers fall back to a 2D
        placement in that case.
    """
    local = floor_jacobian(projector, reference, pose, viewport)
    if local is None:
        logger.debug("Reference %s is not projectable; no floor inversion", reference)
        return None
    ref_screen, jacobian = local
    det = float(np.linalg.det(jacobian))
    if abs(det) < determinant_threshold:
        logger.debug("Floor Jacobian is degenerate (det=%.3g)", det)
        return None
    delta = np.array([screen_x - ref_screen.x, screen_y - ref_screen.y])
    world_dx, world_dz = np.linalg.solve(jacobian, delta)
    return WorldPoint(reference.x + float(world_dx), reference.y, reference.z + float(world_dz))
