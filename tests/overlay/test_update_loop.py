"""Unit tests for the per-frame position update loop."""

import asyncio

import pytest

from scanpeople.mapping.points import Anchor, NormalizedPoint, WorldPoint
from scanpeople.mapping.projector import PinholeProjector
from scanpeople.overlay.depth_scale import legacy_perspective_scale
from scanpeople.overlay.people import PeopleStore
from scanpeople.overlay.scheduler import ManualFrameClock
from scanpeople.overlay.update_loop import PositionUpdateLoop
from scanpeople.placement.roles import Appearance
from scanpeople.viewer.context import ViewerContext
from scanpeople.viewer.simulated import SimulatedViewer

LOOK = Appearance(color_index=0, pose_index=0, flip=False)


class RecordingProjector(PinholeProjector):
    """Pinhole projector that remembers the pose of every call."""

    def __init__(self):
        super().__init__()
        self.poses = []

    def forward_project(self, point, pose, viewport):
        self.poses.append(pose)
        return super().forward_project(point, pose, viewport)


def make_loop(viewer=None, connect=True, strength=0.7):
    viewer = viewer or SimulatedViewer()
    context = ViewerContext(viewer)
    if connect:
        assert asyncio.run(context.connect("test-scan"))
    clock = ManualFrameClock()
    store = PeopleStore()
    loop = PositionUpdateLoop(store, context, clock.request_frame, perspective_strength=strength)
    context.subscribe_to_pose(loop.schedule)
    return viewer, store, loop, clock


def anchored(store, x, y, z):
    return store.add("Student", LOOK, anchor=Anchor(WorldPoint(x, y, z), 0))


class TestScheduling:
    """Test suite for frame coalescing of pose updates."""

    def test_burst_of_pose_changes_gives_one_pass(self):
        projector = RecordingProjector()
        viewer, store, loop, clock = make_loop(SimulatedViewer(projector=projector))
        anchored(store, 0.0, 0.0, -4.0)
        clock.advance()
        projector.poses.clear()
        passes = loop.passes

        for yaw in range(1, 6):
            viewer.move_camera(yaw=float(yaw))

        assert clock.queued == 1
        clock.advance()
        assert loop.passes == passes + 1
        assert [pose.yaw for pose in projector.poses] == [5.0]

    def test_listeners_receive_state(self):
        viewer, store, loop, clock = make_loop()
        person = anchored(store, 0.0, 0.0, -4.0)
        received = []
        loop.add_listener(received.append)

        viewer.move_camera(yaw=3.0)
        clock.advance()

        assert len(received) == 1
        assert received[0][0].entity_id == person.id

    def test_disconnected_context_skips_pass(self):
        _, store, loop, _ = make_loop(connect=False)
        anchored(store, 0.0, 0.0, -4.0)

        assert not loop.update_positions()
        assert loop.passes == 0

    def test_empty_viewport_skips_pass(self):
        viewer, store, loop, _ = make_loop()
        person = anchored(store, 0.0, 0.0, -4.0)
        assert loop.update_positions()
        before = loop.screen_position(person.id)

        viewer.resize(0, 0)

        assert not loop.update_positions()
        assert loop.screen_position(person.id) == before


class TestVisualState:
    """Test suite for derived render instructions."""

    def test_behind_camera_is_hidden(self):
        _, store, loop, _ = make_loop()
        person = anchored(store, 0.0, 0.0, 4.0)

        state = loop.recompute_visual_state()[0]

        assert state.entity_id == person.id
        assert not state.visible
        assert state.screen_x is None
        assert loop.screen_position(person.id) is None

    def test_near_figure_in_front_and_larger(self):
        _, store, loop, _ = make_loop()
        near = anchored(store, 0.0, 0.0, -4.0)
        far = anchored(store, 0.0, 0.0, -12.0)

        states = {s.entity_id: s for s in loop.recompute_visual_state()}

        assert states[near.id].visible and states[far.id].visible
        assert states[near.id].stack_order > states[far.id].stack_order
        assert states[near.id].scale > states[far.id].scale
        assert states[near.id].screen_y > states[far.id].screen_y

    def test_follows_camera_turn(self):
        viewer, store, loop, clock = make_loop()
        person = anchored(store, 0.0, 0.0, -4.0)
        loop.update_positions()
        before = loop.screen_position(person.id)

        viewer.move_camera(yaw=10.0)
        clock.advance()

        # turning left moves the scene to the right on screen
        assert loop.screen_position(person.id).x > before.x

    def test_manual_scale_multiplies(self):
        _, store, loop, _ = make_loop()
        person = anchored(store, 0.0, 0.0, -6.0)
        base = loop.recompute_visual_state()[0].scale

        person.scale = 1.5

        assert loop.visual_state()[0].scale == pytest.approx(base * 1.5)

    def test_legacy_figure_uses_viewport_fraction(self):
        _, store, loop, _ = make_loop(strength=0.5)
        person = store.add("Teacher", LOOK, position=NormalizedPoint(0.25, 0.8))

        state = loop.recompute_visual_state()[0]

        assert not state.anchored
        assert (state.screen_x, state.screen_y) == (320.0, 576.0)
        assert state.scale == pytest.approx(legacy_perspective_scale(0.8, 0.5))
        assert state.stack_order == 80_000
        assert loop.screen_position(person.id) is None

    def test_zero_strength_keeps_base_size(self):
        _, store, loop, _ = make_loop(strength=0.0)
        anchored(store, 0.0, 0.0, -4.0)
        anchored(store, 0.0, 0.0, -12.0)

        assert [s.scale for s in loop.recompute_visual_state()] == [1.0, 1.0]
