from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Any, Callable, Deque, Optional

from ..errors import ConfigurationError
from .engine import Engine, StepStatus


logger = logging.getLogger(__name__)

Task = Callable[[], None]
Scheduler = Callable[[Task], None]
Clock = Callable[[], float]


class InlineScheduler:
    """Run scheduled slices immediately, one after another.

    Tasks scheduled from inside a running task are queued rather than nested,
    so a long search does not grow the call stack.
    """

    def __init__(self) -> None:
        self._queue: Deque[Task] = deque()
        self._running = False

    def __call__(self, task: Task) -> None:
        self._queue.append(task)
        if self._running:
            return
        self._running = True
        try:
            while self._queue:
                self._queue.popleft()()
        finally:
            self._running = False


def asyncio_scheduler(loop: Optional[asyncio.AbstractEventLoop] = None) -> Scheduler:
    """Scheduler that yields to an event loop between slices."""
    target = loop or asyncio.get_running_loop()

    def schedule(task: Task) -> None:
        target.call_soon(task)

    return schedule


def validate_budget(milliseconds: Any) -> int:
    if isinstance(milliseconds, bool) or not isinstance(milliseconds, int) or milliseconds < 0:
        raise ConfigurationError("milliseconds must be an integer >= 0")
    return milliseconds


class TimeSlicedStepper:
    """Drive an engine in wall-clock slices.

    The budget is a soft deadline. The clock is only sampled between steps,
    and when a slice expires the stepper hands the rest of the work to its
    scheduler and keeps going until the pass completes. The caller always
    gets a finished result, exactly once.
    """

    def __init__(
        self,
        engine: Engine,
        scheduler: Optional[Scheduler] = None,
        clock: Clock = time.perf_counter,
    ) -> None:
        self.engine = engine
        self.scheduler: Scheduler = scheduler or InlineScheduler()
        self.clock = clock
        self.slices = 0
        self._slice_s = 0.0
        self._started = 0.0
        self._callback: Optional[Callable[[Any], None]] = None
        self._cancelled = False

    def step_for_budget(self, milliseconds: int, callback: Callable[[Any], None]) -> None:
        ms = validate_budget(milliseconds)
        self.engine.claim(self)
        self._slice_s = ms / 1000
        self._started = self.clock()
        self._callback = callback
        self._cancelled = False
        self.slices = 0
        self.engine.on_resume = self._schedule
        self._run_slice()

    def cancel(self) -> None:
        """Do not start another slice; the callback will not be invoked."""
        self._cancelled = True
        self._callback = None
        self.engine.release(self)

    def _schedule(self) -> None:
        self.scheduler(self._run_slice)

    def _run_slice(self) -> None:
        if self._cancelled or self._callback is None:
            return
        self.slices += 1
        deadline = self.clock() + self._slice_s
        try:
            status = self.engine.advance()
            while status is StepStatus.CONTINUING and self.clock() < deadline:
                status = self.engine.advance()
        except Exception:
            self._callback = None
            self.engine.release(self)
            raise

        if status is StepStatus.COMPLETED:
            self._deliver()
        elif status is StepStatus.CONTINUING:
            if self.slices == 1:
                logger.debug(
                    "budget of %d ms exhausted before depth %s completed; continuing",
                    int(self._slice_s * 1000),
                    self.engine.depth,
                )
            self._schedule()
        # AWAITING_SCORE: the late report schedules the next slice

    def _deliver(self) -> None:
        callback, self._callback = self._callback, None
        self.engine.release(self)
        elapsed_ms = int((self.clock() - self._started) * 1000)
        logger.debug("search finished in %d ms over %d slice(s)", elapsed_ms, self.slices)
        if callback is not None:
            callback(self.engine.best())
