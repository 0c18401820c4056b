"""Sample placement points inside a lasso polygon.

Candidates are drawn inside the polygon's bounding box with a
centre-weighted distribution so that groups look like they gather in
the middle of the selected area rather than along its border.  Each
fraction comes from a Box–Muller style expression around 0.5 and is
clamped to ``[0.02, 0.98]``; candidates outside the polygon are
rejected.  The number of attempts is capped so that thin or
degenerate polygons simply yield fewer points.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..mapping.points import NormalizedPoint
from ..utils.logging import get_logger
from .polygon import MIN_VERTICES, bounding_box, point_in_polygon

logger = get_logger(__name__)

JITTER_SPREAD = 0.2
JITTER_MIN = 0.02
JITTER_MAX = 0.98


def jittered_random(rng: np.random.Generator) -> float:
    """Centre-biased fraction in ``[0.02, 0.98]``."""
    # 1 - random() keeps u1 in (0, 1] so the logarithm is defined
    u1 = 1.0 - rng.random()
    u2 = rng.random()
    value = 0.5 + JITTER_SPREAD * math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return max(JITTER_MIN, min(JITTER_MAX, value))


@dataclass
class RegionSampler:
    """Draw up to ``target_count`` points inside a polygon."""

    max_attempt_multiplier: int = 20
    """Attempts allowed per requested point before giving up."""

    def sample(
        self,
        polygon: Sequence[NormalizedPoint],
        target_count: int,
        rng: Optional[np.random.Generator] = None,
    ) -> List[NormalizedPoint]:
        """Sample points inside ``polygon``.

        Parameters
        ----------
        polygon : sequence of NormalizedPoint
            Closed lasso polygon with at least three vertices.
        target_count : int
            Number of points wanted.
        rng : numpy.random.Generator, optional
            Random source.  A fresh unseeded generator is used if omitted.

        Returns
        -------
        list of NormalizedPoint
            At most ``target_count`` points, all inside the polygon.
            Fewer points are returned when the attempt budget runs out.
        """
        if len(polygon) < MIN_VERTICES:
            raise ValueError(f"polygon needs at least {MIN_VERTICES} vertices, got {len(polygon)}")
        if target_count <= 0:
            return []
        rng = rng if rng is not None else np.random.default_rng()

        x_min, y_min, x_max, y_max = bounding_box(polygon)
        width = x_max - x_min
        height = y_max - y_min
        max_attempts = target_count * self.max_attempt_multiplier

        points: List[NormalizedPoint] = []
        attempts = 0
        while len(points) < target_count and attempts < max_attempts:
            attempts += 1
            px = x_min + width * jittered_random(rng)
            py = y_min + height * jittered_random(rng)
            if point_in_polygon(px, py, polygon):
                points.append(NormalizedPoint(px, py))

        if len(points) < target_count:
            logger.info(
                "Sampled %d of %d points after %d attempts",
                len(points), target_count, attempts,
            )
        return points
