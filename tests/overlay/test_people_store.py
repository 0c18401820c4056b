"""Unit tests for the people store."""

import pytest

from scanpeople.mapping.points import Anchor, NormalizedPoint, WorldPoint
from scanpeople.overlay.people import PeopleStore, Person
from scanpeople.placement.roles import Appearance

LOOK = Appearance(color_index=3, pose_index=42, flip=True)


class TestPeopleStore:
    """Test suite for PeopleStore."""

    def test_ids_are_sequential(self):
        store = PeopleStore()
        first = store.add("Teacher", LOOK, position=NormalizedPoint(0.1, 0.2))
        second = store.add("Student", LOOK, position=NormalizedPoint(0.3, 0.4))

        assert (first.id, second.id) == (1, 2)
        assert second.name == "Student 2"
        assert store.next_id == 3

    def test_ids_not_reused_after_remove(self):
        store = PeopleStore()
        person = store.add("Teacher", LOOK, position=NormalizedPoint(0.1, 0.2))
        store.remove(person.id)

        assert store.add("Teacher", LOOK, position=NormalizedPoint(0.1, 0.2)).id == 2
        assert len(store) == 1

    def test_requires_exactly_one_placement(self):
        store = PeopleStore()
        with pytest.raises(ValueError):
            store.add("Teacher", LOOK)
        with pytest.raises(ValueError):
            store.add(
                "Teacher",
                LOOK,
                anchor=Anchor(WorldPoint(0, 0, 0), 0),
                position=NormalizedPoint(0.5, 0.5),
            )

    def test_unknown_id(self):
        with pytest.raises(KeyError):
            PeopleStore().get(7)

    def test_snapshot_is_a_copy(self):
        store = PeopleStore()
        store.add("Teacher", LOOK, position=NormalizedPoint(0.1, 0.2))
        snapshot = store.snapshot()
        store.clear()

        assert len(snapshot) == 1
        assert len(store) == 0

    def test_replace_keeps_ids_ahead(self):
        store = PeopleStore()
        people = [Person(id=9, name="Teacher 9", role="Teacher", position=NormalizedPoint(0.5, 0.5))]

        store.replace(people, next_id=4)

        assert store.next_id == 10


class TestPersonRecord:
    """Test suite for Person serialization."""

    def test_anchored_record(self):
        person = Person(
            id=5,
            name="Student 5",
            role="Student",
            anchor=Anchor(WorldPoint(1.0, 0.0, -2.0), 1),
            color_index=2,
            pose_index=17,
        )
        data = person.to_dict()

        assert data["anchor"] == {"x": 1.0, "y": 0.0, "z": -2.0}
        assert data["floorIndex"] == 1
        assert "legacy" not in data
        assert Person.from_dict(data) == person

    def test_legacy_record(self):
        person = Person(id=2, name="Ms Smith", role="Teacher", position=NormalizedPoint(0.4, 0.7), scale=1.3)
        data = person.to_dict()

        assert data["legacy"] is True
        restored = Person.from_dict(data)
        assert restored.legacy
        assert restored.name == "Ms Smith"
        assert restored.scale == 1.3

    def test_missing_name_defaults_to_role_and_id(self):
        person = Person.from_dict({"id": 3, "role": "Student", "position": {"x": 0.5, "y": 0.5}})
        assert person.name == "Student 3"
        assert person.color_index == 0

    def test_record_without_placement_rejected(self):
        with pytest.raises(ValueError):
            Person.from_dict({"id": 1, "role": "Student"})
