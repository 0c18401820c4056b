"""Single and bulk placement of figures.

A placement yields either an `Anchor` (a world position that follows
the camera) or a legacy `NormalizedPoint` (a fixed fraction of the
viewport).  3D anchors are only produced while the viewer is connected
and a reference floor point is known; every point that cannot be
promoted to 3D is kept as a legacy placement rather than dropped.
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from ..mapping.points import Anchor, Intersection, NormalizedPoint, WorldPoint
from ..utils.logging import get_logger
from ..viewer.context import ViewerContext
from .polygon import MIN_VERTICES
from .sampler import RegionSampler

logger = get_logger(__name__)

Placement = Union[Anchor, NormalizedPoint]


class Placer:
    """Turn clicks and lassos into anchors or legacy positions."""

    def __init__(
        self,
        context: ViewerContext,
        sampler: Optional[RegionSampler] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.context = context
        self.sampler = sampler or RegionSampler()
        self.rng = rng if rng is not None else np.random.default_rng()

    def _promote(self, point: NormalizedPoint, reference: Intersection) -> Optional[Anchor]:
        viewport = self.context.viewport_size()
        if viewport.is_empty:
            return None
        screen_x, screen_y = viewport.to_pixels(point)
        world = self.context.screen_to_floor(screen_x, screen_y, reference.position, viewport)
        if world is None:
            return None
        return Anchor(world, reference.floor_index)

    def place_single(
        self,
        target: Union[WorldPoint, Intersection, NormalizedPoint],
        floor_context: Optional[Intersection] = None,
    ) -> Placement:
        """Place one figure.

        Parameters
        ----------
        target : WorldPoint, Intersection or NormalizedPoint
            A world hit from the viewer, or a normalized click position.
        floor_context : Intersection, optional
            Reference floor hit.  Supplies the floor index for a bare
            `WorldPoint` and the reference for promoting a 2D click.

        Returns
        -------
        Anchor or NormalizedPoint
        """
        if isinstance(target, Intersection):
            return target.to_anchor()
        if isinstance(target, WorldPoint):
            floor_index = floor_context.floor_index if floor_context is not None else None
            return Anchor(target, floor_index)
        if self.context.ready and floor_context is not None:
            anchor = self._promote(target, floor_context)
            if anchor is not None:
                return anchor
            logger.warning("Click at (%.3f, %.3f) could not be projected to the floor; placing in 2D", target.x, target.y)
        return target

    def place_bulk(
        self,
        polygon: Sequence[NormalizedPoint],
        count: int,
        floor_context: Optional[Intersection] = None,
    ) -> List[Placement]:
        """Sample ``count`` points in ``polygon`` and place each of them.

        Points are promoted to 3D when the viewer is connected and a
        reference is given; a point whose promotion fails falls back to
        a legacy placement on its own.  Fewer than ``count`` placements
        are returned when the sampler runs out of attempts.
        """
        if len(polygon) < MIN_VERTICES:
            raise ValueError(f"lasso needs at least {MIN_VERTICES} points")
        samples = self.sampler.sample(polygon, count, self.rng)

        use_3d = self.context.ready and floor_context is not None
        if self.context.ready and floor_context is None:
            logger.warning("No 3D reference intersection available; placing %d figures in 2D", len(samples))

        placements: List[Placement] = []
        fallbacks = 0
        for point in samples:
            anchor = self._promote(point, floor_context) if use_3d else None
            if anchor is not None:
                placements.append(anchor)
            else:
                if use_3d:
                    fallbacks += 1
                placements.append(point)

        if fallbacks:
            logger.warning("%d of %d figures could not be anchored in 3D and were placed in 2D", fallbacks, len(samples))
        return placements
