"""Render a lasso and its sampled points for visual inspection.

Usage:
    render_lasso_preview(polygon, samples, Path("lasso.png"), label="20 people")
"""

from pathlib import Path
from typing import Optional, Sequence

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Polygon as PolygonPatch

from ..mapping.points import NormalizedPoint
from ..placement.polygon import vertex_centroid

LASSO_COLOR = (232 / 255, 93 / 255, 58 / 255)


def render_lasso_preview(
    polygon: Sequence[NormalizedPoint],
    samples: Sequence[NormalizedPoint],
    output_path: Path,
    label: Optional[str] = None,
    width: int = 1280,
    height: int = 720,
) -> Path:
    """Draw ``polygon`` and ``samples`` in viewport space and save a PNG.

    Parameters
    ----------
    polygon : sequence of NormalizedPoint
        Lasso vertices; drawn closed with a dashed outline and a
        translucent fill.
    samples : sequence of NormalizedPoint
        Sampled placement points.
    output_path : Path
        Destination PNG.
    label : str, optional
        Text drawn at the vertex centroid, e.g. the requested count.
    width, height : int
        Viewport size in pixels used for the figure's aspect ratio.

    Returns
    -------
    Path
        The written file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(width / 100, height / 100), dpi=100)
    try:
        ax.set_xlim(0, 1)
        ax.set_ylim(1, 0)  # screen y grows downwards
        ax.set_aspect(height / width)
        ax.set_facecolor('#1b1b1f')

        outline = PolygonPatch(
            [(p.x, p.y) for p in polygon],
            closed=True,
            facecolor=(*LASSO_COLOR, 0.08),
            edgecolor=(*LASSO_COLOR, 0.8),
            linestyle=(0, (6, 4)),
            linewidth=2,
        )
        ax.add_patch(outline)

        if samples:
            ax.scatter([p.x for p in samples], [p.y for p in samples], s=12, color='white', zorder=3)

        if label and polygon:
            centre = vertex_centroid(polygon)
            ax.text(centre.x, centre.y, label, color=LASSO_COLOR, ha='center', va='center', fontweight='bold')

        ax.set_xticks([])
        ax.set_yticks([])
        fig.savefig(output_path, bbox_inches='tight')
    finally:
        plt.close(fig)
    return output_path
