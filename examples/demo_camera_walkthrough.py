"""Demo script: a crowd that stays on the floor while the camera moves.

Places a lasso of people in a simulated scan, then walks and turns the
camera in small steps.  After each frame it prints how many figures are
visible and how the nearest and farthest ones are scaled, showing the
anchors sliding across the screen and shrinking or growing with depth.

Usage:
    python examples/demo_camera_walkthrough.py
"""

import asyncio

import numpy as np

from scanpeople.mapping.points import WorldPoint
from scanpeople.overlay.scheduler import ManualFrameClock
from scanpeople.session import OverlaySession, OverlaySettings
from scanpeople.viewer.simulated import SimulatedViewer

LASSO = [(380, 450), (900, 450), (960, 650), (320, 650)]


def place_crowd(session: OverlaySession, viewer: SimulatedViewer, count: int):
    viewer.hover_screen(640, 550)
    session.start_bulk_placement(count=count)
    session.begin_lasso(*LASSO[0])
    for x, y in LASSO[1:]:
        session.extend_lasso(x, y)
    return session.finish_lasso()


def describe(session: OverlaySession, label: str):
    states = session.loop.visual_state()
    visible = sorted((s for s in states if s.visible), key=lambda s: s.stack_order)
    if not visible:
        print(f"{label:>22}: nothing in view")
        return
    far, near = visible[0], visible[-1]
    print(
        f"{label:>22}: {len(visible):3d}/{len(states)} visible, "
        f"nearest #{near.entity_id} x{near.scale:.2f}, farthest #{far.entity_id} x{far.scale:.2f}"
    )


async def main():
    print("=" * 70)
    print("CAMERA WALKTHROUGH DEMO")
    print("=" * 70)

    viewer = SimulatedViewer()
    clock = ManualFrameClock()
    session = OverlaySession(OverlaySettings(), viewer, clock.request_frame, np.random.default_rng(11))
    await session.connect("demo-scan")

    crowd = place_crowd(session, viewer, 30)
    print(f"\nPlaced {len(crowd)} people ({sum(not p.legacy for p in crowd)} anchored in 3D)\n")
    clock.advance()
    describe(session, "start")

    for step in range(1, 6):
        position = viewer.pose.position
        viewer.move_camera(position=WorldPoint(position.x, position.y, position.z - 0.5))
        clock.advance()
        describe(session, f"walk forward {step * 0.5:.1f} m")

    for yaw in (10.0, 25.0, 45.0, 70.0):
        viewer.move_camera(yaw=yaw)
        clock.advance()
        describe(session, f"turn left {yaw:.0f} deg")

    session.disconnect()
    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(main())
