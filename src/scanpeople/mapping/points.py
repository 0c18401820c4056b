"""Point types shared by the projection and placement code.

World coordinates follow the viewer's convention: ``y`` is the
vertical axis, so a floor is a plane of constant ``y``.  Screen
coordinates are pixels measured from the top-left corner of the
viewer, with a depth value attached; a negative depth means the
point lies behind the camera.  Normalized coordinates are fractions
of the viewport in ``[0, 1]`` and are used wherever geometry has to
be independent of the current pixel size.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class WorldPoint:
    """A 3D coordinate in the viewer's world space."""

    x: float
    y: float
    z: float

    def offset(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "WorldPoint":
        return WorldPoint(self.x + dx, self.y + dy, self.z + dz)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorldPoint":
        return cls(float(data["x"]), float(data["y"]), float(data["z"]))


@dataclass(frozen=True)
class ScreenPoint:
    """A pixel position plus the depth reported by the projector."""

    x: float
    y: float
    depth: float

    @property
    def visible(self) -> bool:
        """Whether the point is in front of the camera."""
        return self.depth >= 0.0


@dataclass(frozen=True)
class NormalizedPoint:
    """A viewport-relative coordinate, both components in ``[0, 1]``."""

    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizedPoint":
        return cls(float(data["x"]), float(data["y"]))


@dataclass(frozen=True)
class ViewportSize:
    """Pixel dimensions of the viewer."""

    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        """True while the viewer has not been laid out yet."""
        return self.width <= 0 or self.height <= 0

    def to_pixels(self, point: NormalizedPoint) -> Tuple[float, float]:
        return (point.x * self.width, point.y * self.height)

    def to_normalized(self, x: float, y: float) -> NormalizedPoint:
        if self.is_empty:
            raise ValueError("cannot normalise against an empty viewport")
        return NormalizedPoint(x / self.width, y / self.height)


@dataclass(frozen=True)
class Anchor:
    """A world position bound to one placed figure.

    The floor index is taken from the intersection used to create the
    anchor and is never changed afterwards.
    """

    point: WorldPoint
    floor_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"anchor": self.point.to_dict(), "floor_index": self.floor_index}


@dataclass(frozen=True)
class Intersection:
    """The viewer's latest pointer-hover hit on the scanned geometry."""

    position: WorldPoint
    floor_index: Optional[int] = None
    normal: Optional[WorldPoint] = None

    def to_anchor(self) -> Anchor:
        return Anchor(self.position, self.floor_index)
