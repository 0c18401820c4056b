"""Keep anchored figures attached to the scan as the camera moves.

Every camera pose change requests a pass through a `FrameScheduler`,
so a burst of notifications within one frame yields one pass that
uses the latest pose.  A pass projects each anchored person with the
viewer's forward projection and stores the results; the visual state
derived from them gives each figure its pixel position, its stacking
order (nearer in front) and its final scale (depth scale times the
person's manual scale).  Figures that cannot be projected or lie
behind the camera are hidden.

Legacy figures are not projected: they stay at their viewport
fraction and only use the vertical-position scale.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..mapping.points import ScreenPoint
from ..utils.logging import get_logger
from ..viewer.context import ViewerContext
from .depth_scale import depth_scale, depth_stack_order, legacy_perspective_scale, legacy_stack_order
from .people import PeopleStore
from .scheduler import FrameScheduler, FrameTask

logger = get_logger(__name__)


@dataclass(frozen=True)
class VisualState:
    """Render instructions for one figure."""

    entity_id: int
    visible: bool
    screen_x: Optional[float]
    screen_y: Optional[float]
    scale: float
    stack_order: int
    anchored: bool


StateListener = Callable[[List[VisualState]], None]


class PositionUpdateLoop:
    """Re-project anchored people once per frame after camera changes."""

    def __init__(
        self,
        store: PeopleStore,
        context: ViewerContext,
        request_frame: Callable[[FrameTask], None],
        perspective_strength: float = 0.7,
    ):
        self.store = store
        self.context = context
        self.perspective_strength = perspective_strength
        self.scheduler = FrameScheduler(self.run, request_frame)
        self.passes = 0
        self._screen: Dict[int, Optional[ScreenPoint]] = {}
        self._listeners: List[StateListener] = []

    def add_listener(self, listener: StateListener) -> None:
        """Call ``listener`` with the visual state after every completed pass."""
        self._listeners.append(listener)

    def schedule(self, _pose=None) -> bool:
        """Request a pass on the next frame; usable directly as a pose observer."""
        return self.scheduler.request()

    def update_positions(self) -> bool:
        """Project every anchored person with the current pose.

        Returns
        -------
        bool
            False if the pass was skipped because the viewer is not
            connected or has no size yet; the previous projections are
            kept unchanged in that case.
        """
        if not self.context.ready:
            return False
        viewport = self.context.viewport_size()
        if viewport.is_empty:
            logger.debug("Viewport not laid out yet; skipping position update")
            return False

        projected: Dict[int, Optional[ScreenPoint]] = {}
        for person in self.store.snapshot():
            if person.anchor is None:
                continue
            screen = self.context.forward_project(person.anchor.point, viewport)
            projected[person.id] = screen if screen is not None and screen.visible else None
        self._screen = projected
        self.passes += 1
        return True

    def screen_position(self, person_id: int) -> Optional[ScreenPoint]:
        """Last projection of an anchored person, or None if hidden."""
        return self._screen.get(person_id)

    def visual_state(self) -> List[VisualState]:
        """Derive render instructions for every person from the last pass."""
        viewport = self.context.viewport_size()
        strength = self.perspective_strength
        states: List[VisualState] = []
        for person in self.store.snapshot():
            if person.anchor is None:
                position = person.position
                states.append(VisualState(
                    entity_id=person.id,
                    visible=True,
                    screen_x=position.x * viewport.width,
                    screen_y=position.y * viewport.height,
                    scale=legacy_perspective_scale(position.y, strength) * person.scale,
                    stack_order=legacy_stack_order(position.y),
                    anchored=False,
                ))
                continue

            screen = self._screen.get(person.id)
            if screen is None:
                states.append(VisualState(person.id, False, None, None, 0.0, 0, True))
                continue
            states.append(VisualState(
                entity_id=person.id,
                visible=True,
                screen_x=screen.x,
                screen_y=screen.y,
                scale=depth_scale(screen.depth, strength) * person.scale,
                stack_order=depth_stack_order(screen.depth),
                anchored=True,
            ))
        return states

    def recompute_visual_state(self) -> List[VisualState]:
        """Run a projection pass immediately and return the resulting state."""
        self.update_positions()
        return self.visual_state()

    def run(self) -> None:
        """One scheduled pass: project, then notify listeners."""
        if not self.update_positions():
            return
        states = self.visual_state()
        for listener in self._listeners:
            listener(states)
