"""Connection to the external scan viewer.

The viewer is an opaque collaborator: it renders the scan, owns the
camera and reports pose changes and pointer intersections through
subscriptions.  `ViewerContext` is the single owner of everything the
overlay learns from it (the latest pose, the latest hover
intersection and the list of pose observers) and tears all of it
down when the connection is disposed or replaced.

When the viewer cannot be reached within the connection timeout the
context switches to 2D fallback mode; placements then use viewport
fractions until a later connection succeeds.
"""

import asyncio
import threading
from typing import Any, Callable, List, Optional, Protocol

from ..mapping.floor_projection import DETERMINANT_THRESHOLD, floor_point_from_screen
from ..mapping.points import Intersection, ScreenPoint, ViewportSize, WorldPoint
from ..utils.logging import get_logger

logger = get_logger(__name__)

PoseCallback = Callable[[Any], None]
IntersectionCallback = Callable[[Optional[Intersection]], None]


class Subscription(Protocol):
    def cancel(self) -> None:
        ...


class ViewerBackend(Protocol):
    """Capabilities the overlay needs from a scan viewer."""

    async def connect(self, model_sid: str) -> None:
        ...

    def forward_project(self, point: WorldPoint, pose, viewport: ViewportSize) -> Optional[ScreenPoint]:
        ...

    def subscribe_pose(self, callback: PoseCallback) -> Subscription:
        ...

    def subscribe_intersection(self, callback: IntersectionCallback) -> Subscription:
        ...

    def viewport_size(self) -> ViewportSize:
        ...


class ViewerContext:
    """Owned viewer state passed to the placement and update code."""

    def __init__(
        self,
        backend: Optional[ViewerBackend] = None,
        connect_timeout: float = 30.0,
        determinant_threshold: float = DETERMINANT_THRESHOLD,
    ):
        self.backend = backend
        self.connect_timeout = connect_timeout
        self.determinant_threshold = determinant_threshold
        self.model_sid: Optional[str] = None
        self.current_pose: Any = None
        self.current_intersection: Optional[Intersection] = None
        self.fallback_mode = False
        self._ready = False
        self._observers: List[PoseCallback] = []
        self._subscriptions: List[Subscription] = []
        self._fallback_viewport = ViewportSize(0, 0)
        self._lock = threading.Lock()

    @property
    def ready(self) -> bool:
        """True while a viewer connection is live."""
        return self._ready

    async def connect(self, model_sid: str) -> bool:
        """Connect to ``model_sid``, replacing any previous connection.

        Returns
        -------
        bool
            True on success.  On failure or timeout the context is left
            in 2D fallback mode and False is returned.
        """
        self.dispose()
        self.model_sid = model_sid
        if self.backend is None:
            logger.info("No viewer backend configured; using 2D placements")
            self.fallback_mode = True
            return False
        try:
            await asyncio.wait_for(self.backend.connect(model_sid), timeout=self.connect_timeout)
        except asyncio.TimeoutError:
            logger.error("Viewer connection to %s timed out after %.1fs", model_sid, self.connect_timeout)
            self.fallback_mode = True
            return False
        except Exception:
            logger.exception("Viewer connection to %s failed", model_sid)
            self.fallback_mode = True
            return False

        self._subscriptions = [
            self.backend.subscribe_pose(self._on_pose),
            self.backend.subscribe_intersection(self._on_intersection),
        ]
        self._ready = True
        self.fallback_mode = False
        logger.info("Viewer connected to %s", model_sid)
        return True

    def dispose(self) -> None:
        """Cancel subscriptions and forget all viewer state."""
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        with self._lock:
            self._observers = []
        self._ready = False
        self.current_pose = None
        self.current_intersection = None

    def subscribe_to_pose(self, callback: PoseCallback) -> Callable[[], None]:
        """Register a pose observer; returns a function that removes it."""
        with self._lock:
            self._observers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                self._observers = [cb for cb in self._observers if cb is not callback]

        return unsubscribe

    def _on_pose(self, pose) -> None:
        self.current_pose = pose
        with self._lock:
            observers = list(self._observers)
        for callback in observers:
            callback(pose)

    def _on_intersection(self, intersection: Optional[Intersection]) -> None:
        self.current_intersection = intersection

    def set_viewport_size(self, width: float, height: float) -> None:
        """Record the overlay size for use when no viewer backend exists."""
        self._fallback_viewport = ViewportSize(width, height)

    def viewport_size(self) -> ViewportSize:
        if self.backend is not None:
            return self.backend.viewport_size()
        return self._fallback_viewport

    def forward_project(self, point: WorldPoint, viewport: Optional[ViewportSize] = None) -> Optional[ScreenPoint]:
        """Project ``point`` with the current pose, or None if unavailable."""
        if not self._ready or self.current_pose is None:
            return None
        viewport = viewport or self.viewport_size()
        return self.backend.forward_project(point, self.current_pose, viewport)

    def screen_to_floor(
        self,
        screen_x: float,
        screen_y: float,
        reference: WorldPoint,
        viewport: Optional[ViewportSize] = None,
    ) -> Optional[WorldPoint]:
        """Inverse floor projection with the current pose."""
        if not self._ready or self.current_pose is None:
            return None
        viewport = viewport or self.viewport_size()
        return floor_point_from_screen(
            screen_x,
            screen_y,
            reference,
            self.current_pose,
            viewport,
            self.backend,
            determinant_threshold=self.determinant_threshold,
        )
