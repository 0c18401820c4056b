"""Unit tests for depth scaling and stacking."""

import numpy as np
import pytest

from scanpeople.overlay.depth_scale import (
    MAX_SCALE,
    MIN_SCALE,
    REFERENCE_DEPTH,
    depth_scale,
    depth_stack_order,
    legacy_perspective_scale,
    legacy_stack_order,
)

DEPTHS = np.concatenate([np.linspace(0.5, 3.0, 26), np.linspace(3.0, 200.0, 200)])
STRENGTHS = np.linspace(0.0, 1.0, 11)


class TestDepthScale:
    """Test suite for depth_scale."""

    def test_bounded(self):
        for s in STRENGTHS:
            for d in DEPTHS:
                assert MIN_SCALE <= depth_scale(d, s) <= MAX_SCALE

    def test_zero_strength_is_identity(self):
        for d in DEPTHS:
            assert depth_scale(d, 0.0) == 1.0

    def test_monotonic_in_depth(self):
        """Closer is never smaller."""
        for s in STRENGTHS[1:]:
            scales = [depth_scale(d, s) for d in DEPTHS]
            assert all(a >= b for a, b in zip(scales, scales[1:]))

    def test_reference_depth_is_neutral(self):
        assert depth_scale(REFERENCE_DEPTH, 0.7) == pytest.approx(1.0)

    def test_full_strength_values(self):
        assert depth_scale(4.0, 1.0) == pytest.approx(2.0)
        assert depth_scale(16.0, 1.0) == pytest.approx(0.5)
        assert depth_scale(0.1, 1.0) == MAX_SCALE
        assert depth_scale(1000.0, 1.0) == MIN_SCALE

    def test_near_zero_depth_guarded(self):
        """Depths under the guard do not blow up."""
        assert depth_scale(0.0, 0.5) == depth_scale(0.5, 0.5)

    def test_negative_depth_rejected(self):
        with pytest.raises(ValueError):
            depth_scale(-1.0, 0.5)


class TestLegacyScale:
    """Test suite for the vertical-position scale of legacy figures."""

    def test_zero_strength_is_identity(self):
        for y in np.linspace(0, 1, 11):
            assert legacy_perspective_scale(y, 0.0) == 1.0

    def test_monotonic_in_height(self):
        """Lower in the frame is never smaller."""
        ys = np.linspace(0.0, 1.0, 101)
        for s in STRENGTHS[1:]:
            scales = [legacy_perspective_scale(y, s) for y in ys]
            assert all(a <= b for a, b in zip(scales, scales[1:]))

    def test_range_at_full_strength(self):
        assert legacy_perspective_scale(0.0, 1.0) == pytest.approx(0.15)
        assert legacy_perspective_scale(1.0, 1.0) == pytest.approx(2.0)


class TestStackOrder:
    """Test suite for stacking orders."""

    def test_nearer_is_in_front(self):
        assert depth_stack_order(2.0) > depth_stack_order(5.0) > depth_stack_order(20.0)

    def test_close_depths_are_distinguished(self):
        """Figures a few centimetres apart still stack in depth order."""
        assert depth_stack_order(2.0) > depth_stack_order(2.01)
        assert depth_stack_order(60.0) > depth_stack_order(60.005)

    def test_depth_order_floor(self):
        assert depth_stack_order(500.0) == 1

    def test_legacy_lower_is_in_front(self):
        assert legacy_stack_order(0.8) > legacy_stack_order(0.3)
        assert legacy_stack_order(0.5) == 50_000
