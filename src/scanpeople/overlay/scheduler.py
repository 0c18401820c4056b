"""Coalesce bursts of update requests into one pass per frame.

`FrameScheduler` keeps a pending flag and queues a single task on the
next frame boundary.  Requests that arrive while a task is queued are
ignored, so a burst of camera notifications produces exactly one
update, and that update reads whatever state is current when it runs.
Cancelling clears the flag; the queued task then does nothing.

The frame boundary itself comes from a clock: `AsyncioFrameClock`
schedules on an asyncio event loop at the display rate, and
`ManualFrameClock` collects tasks until `advance` is called.
"""

import asyncio
import threading
from typing import Callable, List, Optional

from ..utils.logging import get_logger

logger = get_logger(__name__)

FrameTask = Callable[[], None]


class ManualFrameClock:
    """Frame clock driven explicitly by the host."""

    def __init__(self):
        self._queue: List[FrameTask] = []
        self.frames = 0

    def request_frame(self, task: FrameTask) -> None:
        self._queue.append(task)

    @property
    def queued(self) -> int:
        return len(self._queue)

    def advance(self) -> int:
        """Run every task queued before this frame; returns how many ran."""
        tasks, self._queue = self._queue, []
        self.frames += 1
        for task in tasks:
            task()
        return len(tasks)


class AsyncioFrameClock:
    """Frame clock backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, frame_rate: float = 60.0):
        self.loop = loop
        self.frame_interval = 1.0 / frame_rate

    def request_frame(self, task: FrameTask) -> None:
        loop = self.loop or asyncio.get_running_loop()
        loop.call_later(self.frame_interval, task)


class FrameScheduler:
    """Run ``callback`` at most once per frame, however often it is requested."""

    def __init__(self, callback: FrameTask, request_frame: Callable[[FrameTask], None]):
        self._callback = callback
        self._request_frame = request_frame
        self._pending = False
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._pending

    def request(self) -> bool:
        """Queue a run on the next frame; returns False if one is already queued."""
        with self._lock:
            if self._pending:
                return False
            self._pending = True
        self._request_frame(self._run)
        return True

    def cancel(self) -> None:
        with self._lock:
            self._pending = False

    def _run(self) -> None:
        with self._lock:
            if not self._pending:
                return
            self._pending = False
        self._callback()
