"""Figure overlay: people, depth scaling and the position update loop."""

from .depth_scale import (
    MAX_SCALE,
    MIN_SCALE,
    REFERENCE_DEPTH,
    depth_scale,
    depth_stack_order,
    legacy_perspective_scale,
    legacy_stack_order,
)
from .people import PeopleStore, Person
from .photos import PhotoCatalog, silhouette_size
from .scheduler import AsyncioFrameClock, FrameScheduler, ManualFrameClock
from .update_loop import PositionUpdateLoop, VisualState

__all__ = [
    "MAX_SCALE",
    "MIN_SCALE",
    "REFERENCE_DEPTH",
    "depth_scale",
    "depth_stack_order",
    "legacy_perspective_scale",
    "legacy_stack_order",
    "PeopleStore",
    "Person",
    "PhotoCatalog",
    "silhouette_size",
    "AsyncioFrameClock",
    "FrameScheduler",
    "ManualFrameClock",
    "PositionUpdateLoop",
    "VisualState",
]
