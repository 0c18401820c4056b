"""In-process viewer backend.

`SimulatedViewer` stands in for the real scan viewer in the demo and
in tests.  It projects with a `PinholeProjector`, pushes pose and
hover updates to its subscribers the way the real viewer does
(current value first, then every change) and can be told to fail or
stall on connection.
"""

import asyncio
import dataclasses
import math
from typing import Callable, List, Optional

import numpy as np

from ..errors import ViewerUnavailableError
from ..mapping.points import Intersection, ScreenPoint, ViewportSize, WorldPoint
from ..mapping.projector import CameraPose, PinholeProjector


class _Subscription:
    def __init__(self, callbacks: List[Callable], callback: Callable):
        self._callbacks = callbacks
        self._callback = callback

    def cancel(self) -> None:
        if self._callback in self._callbacks:
            self._callbacks.remove(self._callback)


class SimulatedViewer:
    """A scan viewer simulated with an ideal pinhole camera."""

    def __init__(
        self,
        width: float = 1280,
        height: float = 720,
        pose: Optional[CameraPose] = None,
        projector: Optional[PinholeProjector] = None,
        fail: bool = False,
        connect_delay: float = 0.0,
    ):
        self.viewport = ViewportSize(width, height)
        self.pose = pose or CameraPose(position=WorldPoint(0.0, 1.6, 0.0), pitch=-25.0)
        self.projector = projector or PinholeProjector()
        self.fail = fail
        self.connect_delay = connect_delay
        self.model_sid: Optional[str] = None
        self.intersection: Optional[Intersection] = None
        self._pose_callbacks: List[Callable] = []
        self._intersection_callbacks: List[Callable] = []

    async def connect(self, model_sid: str) -> None:
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.fail:
            raise ViewerUnavailableError(f"Scan {model_sid} could not be opened")
        self.model_sid = model_sid

    def forward_project(self, point: WorldPoint, pose, viewport: ViewportSize) -> Optional[ScreenPoint]:
        return self.projector.forward_project(point, pose, viewport)

    def subscribe_pose(self, callback: Callable) -> _Subscription:
        self._pose_callbacks.append(callback)
        callback(self.pose)
        return _Subscription(self._pose_callbacks, callback)

    def subscribe_intersection(self, callback: Callable) -> _Subscription:
        self._intersection_callbacks.append(callback)
        callback(self.intersection)
        return _Subscription(self._intersection_callbacks, callback)

    def viewport_size(self) -> ViewportSize:
        return self.viewport

    def resize(self, width: float, height: float) -> None:
        self.viewport = ViewportSize(width, height)

    def set_pose(self, pose: CameraPose) -> None:
        self.pose = pose
        for callback in list(self._pose_callbacks):
            callback(pose)

    def move_camera(self, **changes) -> CameraPose:
        """Apply field changes (``yaw=``, ``pitch=``, ``position=``...) to the pose."""
        pose = dataclasses.replace(self.pose, **changes)
        self.set_pose(pose)
        return pose

    def hover(self, position: Optional[WorldPoint], floor_index: Optional[int] = 0) -> Optional[Intersection]:
        """Report the pointer over ``position`` (or over nothing)."""
        if position is None:
            self.intersection = None
        else:
            self.intersection = Intersection(position, floor_index, WorldPoint(0.0, 1.0, 0.0))
        for callback in list(self._intersection_callbacks):
            callback(self.intersection)
        return self.intersection

    def hover_screen(self, x: float, y: float, floor_y: float = 0.0, floor_index: int = 0) -> Optional[Intersection]:
        """Hover the pixel ``(x, y)``, hitting the plane ``y = floor_y`` if the ray reaches it."""
        focal = (self.viewport.height / 2.0) / math.tan(math.radians(self.pose.fov) / 2.0)
        direction_cam = np.array([
            (x - self.viewport.width / 2.0) / focal,
            -(y - self.viewport.height / 2.0) / focal,
            -1.0,
        ])
        direction = self.pose.rotation() @ direction_cam
        origin = np.asarray(self.pose.position.as_tuple())
        if direction[1] >= 0:
            return self.hover(None)
        t = (floor_y - origin[1]) / direction[1]
        hit = origin + t * direction
        return self.hover(WorldPoint(float(hit[0]), floor_y, float(hit[2])), floor_index)
