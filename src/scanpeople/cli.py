"""Command-line demo of the overlay engine.

Connects a session to a simulated scan viewer, places a crowd inside a
lasso and one person at a click, advances one frame and logs where
each figure is drawn.

Usage:
    scanpeople-demo --config configs/default.yaml --count 25 --export people.json
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .mapping.projector import CameraPose
from .mapping.points import WorldPoint
from .overlay.scheduler import ManualFrameClock
from .placement.polygon import normalize_polygon
from .qa.lasso_preview import render_lasso_preview
from .session import OverlaySession, OverlaySettings
from .utils.config import apply_env_overrides, load_config
from .utils.logging import get_logger, set_level
from .viewer.simulated import SimulatedViewer

logger = get_logger(__name__)

DEFAULT_LASSO = [(420, 470), (640, 430), (880, 480), (900, 620), (640, 680), (400, 610)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Place people in a simulated scan and report their overlay state")
    parser.add_argument("--config", type=str, default="configs/default.yaml", help="YAML configuration file")
    parser.add_argument("--count", type=int, default=None, help="Number of people in the lasso")
    parser.add_argument("--role", type=str, default="Mixed", help="Role for the crowd (default: Mixed)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible placements")
    parser.add_argument("--yaw", type=float, default=15.0, help="Camera yaw after placement, in degrees")
    parser.add_argument("--offline", action="store_true", help="Simulate an unreachable viewer (2D mode)")
    parser.add_argument("--export", type=str, default=None, help="Write the export JSON here")
    parser.add_argument("--preview", type=str, default=None, help="Write a lasso preview PNG here")
    parser.add_argument("--verbose", action="store_true", help="Log projection details at DEBUG level")
    return parser


async def run_demo(args: argparse.Namespace) -> int:
    settings = OverlaySettings.from_config(apply_env_overrides(load_config(args.config)))
    viewer = SimulatedViewer(
        pose=CameraPose(position=WorldPoint(0.0, 1.6, 0.0), pitch=-20.0),
        fail=args.offline,
    )
    clock = ManualFrameClock()
    session = OverlaySession(settings, viewer, clock.request_frame, np.random.default_rng(args.seed))

    await session.connect()
    centre_x = sum(x for x, _ in DEFAULT_LASSO) / len(DEFAULT_LASSO)
    centre_y = sum(y for _, y in DEFAULT_LASSO) / len(DEFAULT_LASSO)
    viewer.hover_screen(centre_x, centre_y)

    session.start_bulk_placement(count=args.count, role=args.role)
    session.begin_lasso(*DEFAULT_LASSO[0])
    for x, y in DEFAULT_LASSO[1:]:
        session.extend_lasso(x, y)
    crowd = session.finish_lasso()

    session.start_single_placement("Teacher")
    viewer.hover_screen(640, 560)
    single = session.viewer_clicked() or session.click(640, 560)
    session.cancel_placement()

    crowd_ids = {p.id for p in crowd}
    before = [s for s in session.recompute_visual_state() if s.visible and s.entity_id in crowd_ids]
    viewport = session.context.viewport_size()
    samples = [viewport.to_normalized(s.screen_x, s.screen_y) for s in before]

    viewer.move_camera(yaw=args.yaw)
    clock.advance()

    states = session.recompute_visual_state()
    visible = [s for s in states if s.visible]
    logger.info("Placed %d people in the lasso and %s", len(crowd), single.name if single else "nobody")
    logger.info("%d of %d figures visible after turning the camera", len(visible), len(states))
    for state in sorted(visible, key=lambda s: -s.stack_order)[:10]:
        logger.info(
            "  #%d at (%.0f, %.0f) scale %.2f order %d%s",
            state.entity_id, state.screen_x, state.screen_y, state.scale, state.stack_order,
            "" if state.anchored else " (2D)",
        )
    occupancy = session.occupancy()
    logger.info("Occupancy %d/%d (%s)", occupancy.count, occupancy.limit, occupancy.level)

    if args.export:
        session.export_json(Path(args.export))
    if args.preview:
        polygon = normalize_polygon(DEFAULT_LASSO, viewport)
        render_lasso_preview(polygon, samples, Path(args.preview), label=f"{len(crowd)} people")
    session.disconnect()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)
    return asyncio.run(run_demo(args))


if __name__ == "__main__":
    sys.exit(main())
