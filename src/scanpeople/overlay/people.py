"""Placed people and the store that owns them.

The store is mutated only by placement and removal operations and is
read by the position update loop.  Mutations and snapshots are
guarded by a lock so that a host driving the overlay from more than
one thread cannot observe a half-applied change.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..mapping.points import Anchor, NormalizedPoint, WorldPoint
from ..placement.roles import Appearance


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Person:
    """A figure placed in the scan."""

    id: int
    name: str
    role: str
    anchor: Optional[Anchor] = None
    position: Optional[NormalizedPoint] = None
    scale: float = 1.0
    """Manual per-person size multiplier."""

    color_index: int = 0
    pose_index: int = 0
    flip: bool = False
    timestamp: str = field(default_factory=_now)

    @property
    def legacy(self) -> bool:
        """True for figures pinned to a viewport fraction instead of a world point."""
        return self.anchor is None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "scale": self.scale,
            "colorIndex": self.color_index,
            "poseIndex": self.pose_index,
            "flip": self.flip,
            "timestamp": self.timestamp,
        }
        if self.anchor is not None:
            data["anchor"] = self.anchor.point.to_dict()
            data["floorIndex"] = self.anchor.floor_index
        if self.position is not None:
            data["position"] = self.position.to_dict()
            data["legacy"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        anchor = None
        if data.get("anchor"):
            anchor = Anchor(WorldPoint.from_dict(data["anchor"]), data.get("floorIndex"))
        position = NormalizedPoint.from_dict(data["position"]) if data.get("position") else None
        if anchor is None and position is None:
            raise ValueError(f"person record {data.get('id')} has neither an anchor nor a position")
        return cls(
            id=int(data["id"]),
            name=data.get("name") or f"{data['role']} {data['id']}",
            role=data["role"],
            anchor=anchor,
            position=None if anchor is not None else position,
            scale=float(data.get("scale", 1.0)),
            color_index=int(data.get("colorIndex", 0)),
            pose_index=int(data.get("poseIndex", 0)),
            flip=bool(data.get("flip", False)),
            timestamp=data.get("timestamp") or _now(),
        )


class PeopleStore:
    """Ordered collection of placed people with id allocation."""

    def __init__(self):
        self._people: List[Person] = []
        self.next_id = 1
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._people)

    def snapshot(self) -> List[Person]:
        """Copy of the current list, safe to iterate while others mutate the store."""
        with self._lock:
            return list(self._people)

    def get(self, person_id: int) -> Person:
        with self._lock:
            for person in self._people:
                if person.id == person_id:
                    return person
        raise KeyError(f"No person with id {person_id}")

    def add(
        self,
        role: str,
        appearance: Appearance,
        anchor: Optional[Anchor] = None,
        position: Optional[NormalizedPoint] = None,
    ) -> Person:
        """Create a person with the next free id."""
        if (anchor is None) == (position is None):
            raise ValueError("a person needs exactly one of anchor or position")
        with self._lock:
            person = Person(
                id=self.next_id,
                name=f"{role} {self.next_id}",
                role=role,
                anchor=anchor,
                position=position,
                color_index=appearance.color_index,
                pose_index=appearance.pose_index,
                flip=appearance.flip,
            )
            self.next_id += 1
            self._people.append(person)
            return person

    def remove(self, person_id: int) -> Person:
        with self._lock:
            person = self.get(person_id)
            self._people.remove(person)
            return person

    def clear(self) -> int:
        with self._lock:
            removed = len(self._people)
            self._people = []
            return removed

    def replace(self, people: Iterable[Person], next_id: Optional[int] = None) -> None:
        """Swap in a loaded list of people."""
        with self._lock:
            self._people = list(people)
            highest = max((p.id for p in self._people), default=0)
            self.next_id = max(next_id or 0, highest + 1)
