"""Unit tests for the inverse floor projection."""

import numpy as np
import pytest

from scanpeople.mapping.floor_projection import floor_jacobian, floor_point_from_screen
from scanpeople.mapping.points import ScreenPoint, ViewportSize, WorldPoint
from scanpeople.mapping.projector import CameraPose, PinholeProjector


class AffineFloorProjector:
    """Forward projector that is an exact affine map of the floor plane."""

    def __init__(self, matrix, offset=(400.0, 300.0), depth=5.0):
        self.matrix = np.asarray(matrix, dtype=float)
        self.offset = np.asarray(offset, dtype=float)
        self.depth = depth

    def forward_project(self, point, pose, viewport):
        sx, sy = self.matrix @ np.array([point.x, point.z]) + self.offset
        return ScreenPoint(float(sx), float(sy), self.depth)


class UnavailableProjector:
    def forward_project(self, point, pose, viewport):
        return None


VIEWPORT = ViewportSize(800, 600)


class TestFloorPointFromScreen:
    """Test suite for floor_point_from_screen."""

    def test_round_trip_affine(self):
        """An affine projector is inverted exactly."""
        projector = AffineFloorProjector([[40.0, -12.0], [5.0, 25.0]])
        reference = WorldPoint(1.0, 0.0, 2.0)
        target = WorldPoint(3.5, 0.0, -1.25)

        screen = projector.forward_project(target, None, VIEWPORT)
        result = floor_point_from_screen(screen.x, screen.y, reference, None, VIEWPORT, projector)

        assert result is not None
        assert result.x == pytest.approx(target.x, abs=1e-9)
        assert result.z == pytest.approx(target.z, abs=1e-9)

    def test_height_taken_from_reference(self):
        """The recovered point keeps the reference height."""
        projector = AffineFloorProjector([[30.0, 0.0], [0.0, 30.0]])
        reference = WorldPoint(0.0, 2.75, 0.0)

        result = floor_point_from_screen(460.0, 240.0, reference, None, VIEWPORT, projector)

        assert result.y == 2.75
        assert result.x == pytest.approx(2.0)
        assert result.z == pytest.approx(-2.0)

    def test_singular_jacobian_not_invertible(self):
        """A zero determinant yields None."""
        projector = AffineFloorProjector([[20.0, 40.0], [10.0, 20.0]])

        result = floor_point_from_screen(420.0, 310.0, WorldPoint(0.0, 0.0, 0.0), None, VIEWPORT, projector)

        assert result is None

    def test_tiny_determinant_below_threshold(self):
        """Determinants under the threshold are treated as degenerate."""
        projector = AffineFloorProjector([[0.01, 0.0], [0.0, 0.01]])

        result = floor_point_from_screen(401.0, 301.0, WorldPoint(0.0, 0.0, 0.0), None, VIEWPORT, projector)

        assert result is None

    def test_unprojectable_reference(self):
        """No forward projection means no inversion."""
        result = floor_point_from_screen(
            100.0, 100.0, WorldPoint(0.0, 0.0, 0.0), None, VIEWPORT, UnavailableProjector()
        )
        assert result is None

    def test_reference_behind_camera(self):
        """Projections with negative depth are not used."""
        projector = AffineFloorProjector([[30.0, 0.0], [0.0, 30.0]], depth=-1.0)

        result = floor_point_from_screen(420.0, 300.0, WorldPoint(0.0, 0.0, 0.0), None, VIEWPORT, projector)

        assert result is None

    def test_jacobian_columns(self):
        """Jacobian columns are the screen steps for +X and +Z."""
        projector = AffineFloorProjector([[40.0, -12.0], [5.0, 25.0]])

        ref_screen, jacobian = floor_jacobian(projector, WorldPoint(0.0, 0.0, 0.0), None, VIEWPORT)

        assert ref_screen.x == pytest.approx(400.0)
        np.testing.assert_allclose(jacobian, [[40.0, -12.0], [5.0, 25.0]])


class TestPinholeInversion:
    """Inversion through a real perspective projection."""

    def setup_method(self):
        self.projector = PinholeProjector()
        self.pose = CameraPose(position=WorldPoint(0.0, 1.6, 0.0), pitch=-30.0)
        self.viewport = ViewportSize(1280, 720)
        # floor point straight ahead at the centre of the view
        self.reference = WorldPoint(0.0, 0.0, -1.6 / np.tan(np.radians(30.0)))

    def test_reference_pixel_maps_to_reference(self):
        """Zero pixel offset returns the reference point itself."""
        screen = self.projector.forward_project(self.reference, self.pose, self.viewport)

        result = floor_point_from_screen(
            screen.x, screen.y, self.reference, self.pose, self.viewport, self.projector
        )

        assert result.x == pytest.approx(self.reference.x, abs=1e-9)
        assert result.z == pytest.approx(self.reference.z, abs=1e-9)

    def test_nearby_point_approximately_recovered(self):
        """Near the reference the linearisation is a close approximation."""
        target = self.reference.offset(dx=0.2, dz=-0.2)
        screen = self.projector.forward_project(target, self.pose, self.viewport)

        result = floor_point_from_screen(
            screen.x, screen.y, self.reference, self.pose, self.viewport, self.projector
        )

        error = np.hypot(result.x - target.x, result.z - target.z)
        offset = np.hypot(0.2, 0.2)
        assert result.y == 0.0
        assert error < 0.5 * offset
        assert result.x > self.reference.x
        assert result.z < self.reference.z

    def test_edge_on_camera_not_invertible(self):
        """A camera level with the floor plane cannot invert it."""
        pose = CameraPose(position=WorldPoint(0.0, 1.6, 0.0), pitch=0.0)
        reference = WorldPoint(0.0, 1.6, -5.0)

        result = floor_point_from_screen(700.0, 360.0, reference, pose, self.viewport, self.projector)

        assert result is None
