"""Overlay session: the state a host application drives.

An `OverlaySession` owns the viewer context, the people store, the
placer and the position update loop, and implements the interactive
workflow around them: entering and cancelling placement modes,
drawing a lasso, clicking to place one person, editing people,
occupancy reporting, export and saving/loading state.

Usage::

    session = OverlaySession(settings, backend=viewer)
    await session.connect("hvvUfPkLBME")
    session.start_bulk_placement(count=20, role="Mixed")
    session.begin_lasso(100, 400)
    ...
    placed = session.finish_lasso()
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .errors import PlacementError
from .mapping.points import NormalizedPoint
from .overlay.people import PeopleStore, Person
from .overlay.photos import PhotoCatalog, silhouette_size
from .overlay.scheduler import ManualFrameClock
from .overlay.update_loop import PositionUpdateLoop, VisualState
from .placement.placer import Placement, Placer
from .placement.polygon import MIN_VERTICES, normalize_polygon
from .placement.roles import MIXED, SINGLE_ROLES, random_appearance, resolve_role
from .placement.sampler import RegionSampler
from .utils.logging import get_logger
from .viewer.context import ViewerBackend, ViewerContext

logger = get_logger(__name__)

BULK = "bulk"
SINGLE = "single"


@dataclass
class OverlaySettings:
    """User-adjustable settings, loadable from the YAML configuration."""

    model_sid: str = "hvvUfPkLBME"
    sdk_key: str = ""
    connect_timeout: float = 30.0
    scans: List[Dict[str, str]] = field(default_factory=list)
    figure_style: str = "photo"
    figure_size: int = 60
    perspective_strength: int = 70
    """Percent; 0 disables depth scaling."""

    occupancy_limit: int = 50
    default_count: int = 10
    max_bulk_count: int = 200
    max_attempt_multiplier: int = 20
    determinant_threshold: float = 1e-3

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "OverlaySettings":
        viewer = config.get("viewer") or {}
        overlay = config.get("overlay") or {}
        placement = config.get("placement") or {}
        defaults = cls()
        return cls(
            model_sid=str(viewer.get("model_sid", defaults.model_sid)),
            sdk_key=str(viewer.get("sdk_key", defaults.sdk_key) or ""),
            connect_timeout=float(viewer.get("connect_timeout", defaults.connect_timeout)),
            scans=list(viewer.get("scans", [])),
            figure_style=str(overlay.get("figure_style", defaults.figure_style)),
            figure_size=int(overlay.get("figure_size", defaults.figure_size)),
            perspective_strength=int(overlay.get("perspective_strength", defaults.perspective_strength)),
            occupancy_limit=int(placement.get("occupancy_limit", defaults.occupancy_limit)),
            default_count=int(placement.get("default_count", defaults.default_count)),
            max_bulk_count=int(placement.get("max_bulk_count", defaults.max_bulk_count)),
            max_attempt_multiplier=int(placement.get("max_attempt_multiplier", defaults.max_attempt_multiplier)),
            determinant_threshold=float(placement.get("determinant_threshold", defaults.determinant_threshold)),
        )


@dataclass(frozen=True)
class Occupancy:
    count: int
    limit: int
    percent: float
    level: str
    """``ok``, ``warning`` above 70 % or ``over`` above 90 %."""


class OverlaySession:
    """Interactive placement of people over a scan.

    ``request_frame`` schedules a task on the host's next display frame,
    e.g. `AsyncioFrameClock.request_frame`.  Without one the session
    keeps its own `ManualFrameClock` in ``clock`` and the host runs
    pending position updates with `advance_frame`.
    """

    def __init__(
        self,
        settings: Optional[OverlaySettings] = None,
        backend: Optional[ViewerBackend] = None,
        request_frame=None,
        rng: Optional[np.random.Generator] = None,
        photos: Optional[PhotoCatalog] = None,
    ):
        self.settings = settings or OverlaySettings()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.context = ViewerContext(
            backend,
            connect_timeout=self.settings.connect_timeout,
            determinant_threshold=self.settings.determinant_threshold,
        )
        self.store = PeopleStore()
        self.placer = Placer(
            self.context,
            RegionSampler(max_attempt_multiplier=self.settings.max_attempt_multiplier),
            self.rng,
        )
        self.clock: Optional[ManualFrameClock] = None
        if request_frame is None:
            self.clock = ManualFrameClock()
            request_frame = self.clock.request_frame
        self.loop = PositionUpdateLoop(
            self.store,
            self.context,
            request_frame,
            perspective_strength=self.settings.perspective_strength / 100.0,
        )
        self.photos = photos

        self.placement_mode: Optional[str] = None
        self.bulk_count = self.settings.default_count
        self.bulk_role = MIXED
        self.selected_role = "Student"
        self.selected_person_id: Optional[int] = None
        self.lasso: List[Tuple[float, float]] = []
        self.drawing_lasso = False
        self.saved_intersection = None

    # ------------------------------------------------------------------
    # Viewer connection
    # ------------------------------------------------------------------
    @property
    def mode_3d(self) -> bool:
        return self.context.ready

    async def connect(self, model_sid: Optional[str] = None) -> bool:
        """Connect (or switch) to a scan; falls back to 2D on failure."""
        model_sid = model_sid or self.settings.model_sid
        if self.context.model_sid and model_sid != self.context.model_sid:
            if any(not p.legacy for p in self.store.snapshot()):
                logger.warning("Switching scans: 3D-anchored people are specific to %s", self.context.model_sid)
        self.loop.scheduler.cancel()
        connected = await self.context.connect(model_sid)
        self.settings.model_sid = model_sid
        if connected:
            self.context.subscribe_to_pose(self.loop.schedule)
            self.loop.schedule()
        else:
            logger.info("Running in 2D-only mode for %s", model_sid)
        return connected

    def disconnect(self) -> None:
        self.loop.scheduler.cancel()
        self.context.dispose()

    def advance_frame(self) -> int:
        """Run tasks queued on the session's own clock; returns how many ran."""
        if self.clock is None:
            raise RuntimeError("frames are driven by the host's request_frame")
        return self.clock.advance()

    # ------------------------------------------------------------------
    # Settings that affect rendering
    # ------------------------------------------------------------------
    def set_perspective_strength(self, percent: int) -> None:
        self.settings.perspective_strength = max(0, min(100, int(percent)))
        self.loop.perspective_strength = self.settings.perspective_strength / 100.0
        self.loop.schedule()

    def set_figure_size(self, size: int) -> None:
        self.settings.figure_size = int(size)
        self.loop.schedule()

    # ------------------------------------------------------------------
    # Placement modes
    # ------------------------------------------------------------------
    def start_bulk_placement(self, count: Optional[int] = None, role: str = MIXED) -> bool:
        """Enter lasso mode; calling it again while active cancels instead.

        The viewer's current hover intersection is captured here,
        before a drawing overlay would stop the viewer from reporting
        it, and is used as the floor reference for the whole lasso.
        """
        if self.placement_mode == BULK:
            self.cancel_placement()
            return False
        self.cancel_placement()
        self.placement_mode = BULK
        self.bulk_count = count or self.settings.default_count
        self.bulk_role = role
        if self.context.ready:
            self.saved_intersection = self.context.current_intersection
        return True

    def start_single_placement(self, role: Optional[str] = None) -> bool:
        """Enter single placement mode; calling it again while active cancels instead."""
        if self.placement_mode == SINGLE:
            self.cancel_placement()
            return False
        if role is not None:
            if role not in SINGLE_ROLES:
                raise PlacementError(f"{role} cannot be placed individually", {"role": role})
            self.selected_role = role
        self.cancel_placement()
        self.placement_mode = SINGLE
        return True

    def cancel_placement(self) -> None:
        """Leave any placement mode, discarding the partial lasso."""
        self.placement_mode = None
        self.lasso = []
        self.drawing_lasso = False
        self.saved_intersection = None

    # ------------------------------------------------------------------
    # Lasso drawing (viewport pixels)
    # ------------------------------------------------------------------
    def begin_lasso(self, x: float, y: float) -> None:
        if self.placement_mode != BULK:
            return
        self.drawing_lasso = True
        self.lasso = [(x, y)]

    def extend_lasso(self, x: float, y: float) -> None:
        if not self.drawing_lasso or self.placement_mode != BULK:
            return
        self.lasso.append((x, y))

    def finish_lasso(self) -> List[Person]:
        """Close the lasso and place the requested crowd inside it.

        Returns the people added; an empty list if the lasso was too
        small, in which case bulk mode stays active for another try.
        """
        if not self.drawing_lasso or self.placement_mode != BULK:
            return []
        self.drawing_lasso = False
        if len(self.lasso) < MIN_VERTICES:
            logger.warning("Lasso needs at least %d points; draw a larger shape", MIN_VERTICES)
            self.lasso = []
            return []

        polygon = normalize_polygon(self.lasso, self.context.viewport_size())
        count = min(self.bulk_count, self.settings.max_bulk_count)
        people = self.place_bulk(polygon, count, self.bulk_role)
        self.cancel_placement()
        return people

    # ------------------------------------------------------------------
    # Placing people
    # ------------------------------------------------------------------
    def _add(self, role: str, placement: Placement) -> Person:
        appearance = random_appearance(self.rng)
        if isinstance(placement, NormalizedPoint):
            return self.store.add(role, appearance, position=placement)
        return self.store.add(role, appearance, anchor=placement)

    def place_bulk(self, polygon: List[NormalizedPoint], count: int, role: str = MIXED) -> List[Person]:
        placements = self.placer.place_bulk(polygon, count, self.saved_intersection)
        people = [self._add(resolve_role(role, self.rng), placement) for placement in placements]
        anchored = sum(1 for p in people if not p.legacy)
        logger.info("Added %d people (%d anchored in 3D)", len(people), anchored)
        self.loop.schedule()
        return people

    def viewer_clicked(self) -> Optional[Person]:
        """Place the selected role at the viewer's current hover point (3D mode)."""
        if self.placement_mode != SINGLE or not self.context.ready:
            return None
        intersection = self.context.current_intersection
        if intersection is None:
            return None
        person = self._add(self.selected_role, self.placer.place_single(intersection))
        logger.info("Placed %s in 3D", person.name)
        self.loop.schedule()
        return person

    def click(self, x: float, y: float) -> Optional[Person]:
        """Place the selected role at a pixel of the drawing overlay (2D mode)."""
        if self.placement_mode != SINGLE:
            return None
        point = self.context.viewport_size().to_normalized(x, y)
        person = self._add(self.selected_role, self.placer.place_single(point))
        logger.info("Placed %s", person.name)
        self.loop.schedule()
        return person

    # ------------------------------------------------------------------
    # Editing people
    # ------------------------------------------------------------------
    def remove_person(self, person_id: int) -> Person:
        if self.selected_person_id == person_id:
            self.deselect()
        person = self.store.remove(person_id)
        self.loop.schedule()
        return person

    def rename_person(self, person_id: int, name: str) -> Person:
        person = self.store.get(person_id)
        if name and name.strip():
            person.name = name.strip()
        return person

    def set_person_scale(self, person_id: int, scale: float) -> Person:
        if scale <= 0:
            raise ValueError("scale must be positive")
        person = self.store.get(person_id)
        person.scale = float(scale)
        self.loop.schedule()
        return person

    def reset_person_scale(self, person_id: int) -> Person:
        return self.set_person_scale(person_id, 1.0)

    def select(self, person_id: int) -> Person:
        if self.placement_mode is not None:
            raise PlacementError("people cannot be selected while placing")
        person = self.store.get(person_id)
        self.selected_person_id = person_id
        return person

    def deselect(self) -> None:
        self.selected_person_id = None

    def clear(self) -> int:
        self.deselect()
        removed = self.store.clear()
        if removed:
            logger.info("All %d people cleared", removed)
        self.loop.schedule()
        return removed

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def recompute_visual_state(self) -> List[VisualState]:
        return self.loop.recompute_visual_state()

    def figure_dimensions(self, person_id: int) -> Tuple[int, int]:
        """Unscaled container size of a figure in pixels."""
        person = self.store.get(person_id)
        base = self.settings.figure_size
        if self.settings.figure_style == "photo" and self.photos is not None and self.photos.ready:
            return self.photos.container_size(person.role, person.pose_index, base)
        return silhouette_size(base)

    # ------------------------------------------------------------------
    # Reporting and export
    # ------------------------------------------------------------------
    def people_frame(self) -> pd.DataFrame:
        """One row per person with flattened placement columns."""
        rows = []
        for p in self.store.snapshot():
            rows.append({
                "id": p.id,
                "name": p.name,
                "role": p.role,
                "mode": "2D" if p.legacy else "3D",
                "x": p.anchor.point.x if p.anchor else p.position.x,
                "y": p.anchor.point.y if p.anchor else p.position.y,
                "z": p.anchor.point.z if p.anchor else np.nan,
                "floor_index": p.anchor.floor_index if p.anchor else None,
                "scale": p.scale,
            })
        columns = ["id", "name", "role", "mode", "x", "y", "z", "floor_index", "scale"]
        return pd.DataFrame(rows, columns=columns)

    def role_summary(self) -> Dict[str, int]:
        """People per role, most frequent first."""
        frame = self.people_frame()
        if frame.empty:
            return {}
        counts = frame["role"].value_counts(sort=True, ascending=False)
        return {str(role): int(n) for role, n in counts.items()}

    def occupancy(self) -> Occupancy:
        count = len(self.store)
        limit = max(1, int(self.settings.occupancy_limit))
        percent = min(count / limit * 100.0, 100.0)
        if percent > 90:
            level = "over"
        elif percent > 70:
            level = "warning"
        else:
            level = "ok"
        return Occupancy(count, limit, percent, level)

    def export_records(self) -> Dict[str, Any]:
        people = []
        for p in self.store.snapshot():
            entry: Dict[str, Any] = {"name": p.name, "role": p.role}
            if p.anchor is not None:
                entry["anchor"] = p.anchor.point.to_dict()
                entry["floorIndex"] = p.anchor.floor_index
            if p.position is not None:
                entry["position"] = p.position.to_dict()
            people.append(entry)
        return {
            "modelSid": self.settings.model_sid,
            "exportedAt": datetime.now(timezone.utc).isoformat(),
            "occupancyLimit": self.settings.occupancy_limit,
            "totalPeople": len(people),
            "figureStyle": self.settings.figure_style,
            "figureSize": self.settings.figure_size,
            "people": people,
            "roleSummary": self.role_summary(),
        }

    def export_json(self, path: Path) -> Path:
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.export_records(), f, indent=2)
        logger.info("Exported %d people to %s", len(self.store), path)
        return path

    def export_csv(self, path: Path) -> Path:
        path = Path(path)
        self.people_frame().to_csv(path, index=False)
        return path

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def save_state(self, path: Path) -> None:
        state = {
            "people": [p.to_dict() for p in self.store.snapshot()],
            "nextId": self.store.next_id,
            "occupancyLimit": self.settings.occupancy_limit,
            "figureSize": self.settings.figure_size,
            "perspectiveStrength": self.settings.perspective_strength,
        }
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(state, f, indent=2)

    def load_state(self, path: Path) -> int:
        """Restore people and settings saved by `save_state`.

        Records that cannot be restored (no placement, missing id or
        role) are skipped with a single warning.  Returns the number of
        people loaded.
        """
        with open(path, 'r', encoding='utf-8') as f:
            state = json.load(f)
        people: List[Person] = []
        skipped = 0
        for item in state.get("people", []):
            try:
                people.append(Person.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping saved person: %s", exc)
                skipped += 1
        if skipped:
            logger.warning("Skipped %d unreadable people in %s", skipped, path)
        self.store.replace(people, state.get("nextId"))
        self.settings.occupancy_limit = int(state.get("occupancyLimit", self.settings.occupancy_limit))
        self.settings.figure_size = int(state.get("figureSize", self.settings.figure_size))
        self.set_perspective_strength(state.get("perspectiveStrength", self.settings.perspective_strength))
        return len(people)
