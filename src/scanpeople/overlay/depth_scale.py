"""Depth-based scaling and stacking of figures.

Anchored figures are scaled by their projected depth: a figure at the
reference depth keeps its base size, nearer figures grow and farther
ones shrink.  The perspective strength (0–1) blends between no effect
and the full inverse-depth scale, and the result is clamped so that a
figure never vanishes or fills the screen.

Legacy figures have no depth, so their vertical position in the
viewport stands in for it: lower in the frame means closer.

Both functions are monotonic for a fixed strength: a closer figure is
never drawn smaller than a farther one.
"""

REFERENCE_DEPTH = 8.0
"""Depth (roughly metres) at which a figure renders at base size."""

DEPTH_GUARD = 0.5
MIN_SCALE = 0.15
MAX_SCALE = 3.0

STACK_BASE = 100_000
STACK_PER_DEPTH = 1_000
"""Orders per depth unit; depths closer than 0.001 apart can share an order."""


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def depth_scale(depth: float, strength: float) -> float:
    """Scale factor for an anchored figure at ``depth``.

    Parameters
    ----------
    depth : float
        Projected depth; must not be negative.
    strength : float
        Perspective strength in ``[0, 1]``.  Zero disables scaling.

    Returns
    -------
    float
        Scale in ``[0.15, 3.0]``.
    """
    if depth < 0:
        raise ValueError("depth behind the camera has no scale")
    strength = _clamp(strength, 0.0, 1.0)
    if strength == 0:
        return 1.0
    raw = REFERENCE_DEPTH / max(depth, DEPTH_GUARD)
    return _clamp(1.0 + (raw - 1.0) * strength, MIN_SCALE, MAX_SCALE)


def legacy_perspective_scale(y_position: float, strength: float) -> float:
    """Scale factor for a legacy figure at normalized height ``y_position``."""
    strength = _clamp(strength, 0.0, 1.0)
    if strength == 0:
        return 1.0
    y_position = _clamp(y_position, 0.0, 1.0)
    power = 1.5 + strength * 0.8
    min_scale = 1.0 - strength * 0.85
    max_scale = 1.0 + strength * 1.0
    return _clamp(min_scale + (max_scale - min_scale) * y_position ** power, MIN_SCALE, MAX_SCALE)


def depth_stack_order(depth: float) -> int:
    """Stacking order for an anchored figure; nearer figures get higher values.

    Ties are possible: depths within about 0.001 of each other round to
    the same order, and every depth beyond ``STACK_BASE / STACK_PER_DEPTH``
    (100 units) shares the lowest order, 1.
    """
    return max(1, round(STACK_BASE - depth * STACK_PER_DEPTH))


def legacy_stack_order(y_position: float) -> int:
    """Stacking order for a legacy figure; lower in the frame is in front."""
    return round(y_position * STACK_BASE)
