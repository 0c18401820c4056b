"""Forward projection from world space to the screen.

The viewer that renders the scan owns the real camera; the overlay
only ever asks it to project a world point for a given pose and
viewport.  `ForwardProjector` captures that capability so that the
real viewer, the in-process simulated viewer or a test double can be
used interchangeably.

`PinholeProjector` is the reference implementation used by the
simulated viewer.  It follows the viewer's conventions: ``y`` is up,
the camera looks along −Z when yaw and pitch are zero, a positive
pitch looks up and a positive yaw turns to the left.  The focal length
is derived from the vertical field of view so that the projection is
independent of the viewport's aspect ratio.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Protocol

import numpy as np

from .points import ScreenPoint, ViewportSize, WorldPoint


class ForwardProjector(Protocol):
    """Anything that can map a world point to the screen."""

    def forward_project(self, point: WorldPoint, pose, viewport: ViewportSize) -> Optional[ScreenPoint]:
        ...


@dataclass(frozen=True)
class CameraPose:
    """Camera position and orientation as reported by the viewer."""

    position: WorldPoint = field(default_factory=lambda: WorldPoint(0.0, 1.6, 0.0))
    pitch: float = 0.0
    """Rotation about the camera X axis in degrees; positive looks up."""

    yaw: float = 0.0
    """Rotation about the world Y axis in degrees; positive turns left."""

    fov: float = 70.0
    """Vertical field of view in degrees."""

    def rotation(self) -> np.ndarray:
        """Camera-to-world rotation matrix."""
        p = math.radians(self.pitch)
        y = math.radians(self.yaw)
        rot_x = np.array([
            [1.0, 0.0, 0.0],
            [0.0, math.cos(p), -math.sin(p)],
            [0.0, math.sin(p), math.cos(p)],
        ])
        rot_y = np.array([
            [math.cos(y), 0.0, math.sin(y)],
            [0.0, 1.0, 0.0],
            [-math.sin(y), 0.0, math.cos(y)],
        ])
        return rot_y @ rot_x


@dataclass
class PinholeProjector:
    """Project world points through an ideal pinhole camera."""

    min_depth: float = 1e-9
    """Points closer than this to the camera plane cannot be projected."""

    def forward_project(self, point: WorldPoint, pose: CameraPose, viewport: ViewportSize) -> Optional[ScreenPoint]:
        """Project ``point`` for ``pose`` onto a viewport of the given size.

        Parameters
        ----------
        point : WorldPoint
            Point to project.
        pose : CameraPose
            Current camera pose.
        viewport : ViewportSize
            Viewer size in pixels.

        Returns
        -------
        ScreenPoint or None
            Pixel position with the distance along the viewing axis as
            depth.  Points behind the camera keep a negative depth.
            ``None`` if the point lies in the camera plane or the
            viewport is empty.
        """
        if viewport.is_empty:
            return None
        offset = np.asarray(point.as_tuple()) - np.asarray(pose.position.as_tuple())
        cam = pose.rotation().T @ offset
        depth = -cam[2]
        if abs(depth) < self.min_depth:
            return None
        focal = (viewport.height / 2.0) / math.tan(math.radians(pose.fov) / 2.0)
        sx = viewport.width / 2.0 + focal * cam[0] / depth
        sy = viewport.height / 2.0 - focal * cam[1] / depth
        return ScreenPoint(float(sx), float(sy), float(depth))
