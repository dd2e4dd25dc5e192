from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..errors import ConfigurationError, StaleInstanceReuse
from ..model import GameModel, load_model
from .engine import Engine, StepStatus
from .prediction import Prediction
from .stepper import Clock, InlineScheduler, Scheduler, validate_budget


logger = logging.getLogger(__name__)

SLICE_STEPS = 512  # steps per slice before yielding to the scheduler


@dataclass
class IncompletePass:
    """Pass interrupted by the deadline; `engine` holds its frame stack."""

    depth: int
    engine: Engine

    def best(self) -> Any:
        return self.engine.best()


@dataclass
class DeepeningResult:
    """Outcome of one `increment_depth_for_budget` call.

    `depth`/`engine` describe the deepest completed pass (None if none
    completed yet); `incomplete` is the pass that was in flight.
    """

    depth: Optional[int]
    engine: Optional[Engine]
    incomplete: Optional[IncompletePass]
    time_ms: int = 0

    def best(self) -> Any:
        return self.engine.best() if self.engine is not None else None

    def best_score(self) -> Optional[float]:
        return self.engine.best_score() if self.engine is not None else None

    def prediction(self) -> Prediction:
        return self.engine.prediction() if self.engine is not None else Prediction()


class DeepeningSession:
    """Run complete passes at increasing depth under a shared deadline.

    A later call resumes the pass that the previous call left in flight.
    """

    def __init__(
        self,
        model: Any,
        state: Any,
        *,
        start_depth: int = 1,
        max_depth: Optional[int] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Clock = time.perf_counter,
    ) -> None:
        self.model: GameModel = load_model(model)
        if state is None:
            raise ConfigurationError("state is required")
        if isinstance(start_depth, bool) or not isinstance(start_depth, int) or start_depth < 0:
            raise ConfigurationError("start_depth must be an integer >= 0")
        if max_depth is not None and max_depth < start_depth:
            raise ConfigurationError("max_depth must be >= start_depth")
        self.state = state
        self.start_depth = start_depth
        self.max_depth = max_depth
        self.scheduler: Scheduler = scheduler or InlineScheduler()
        self.clock = clock
        self.completed: Optional[Engine] = None
        self.current: Optional[Engine] = None
        self.history: List[dict] = []
        self._deadline = 0.0
        self._started = 0.0
        self._callback: Optional[Callable[[DeepeningResult], None]] = None

    @property
    def finished(self) -> bool:
        """True once `max_depth` has been searched."""
        return (
            self.max_depth is not None
            and self.completed is not None
            and self.completed.depth == self.max_depth
        )

    def increment_depth_for_budget(
        self, milliseconds: int, callback: Callable[[DeepeningResult], None]
    ) -> None:
        ms = validate_budget(milliseconds)
        if self._callback is not None:
            raise StaleInstanceReuse("a deepening call is already in flight on this session")
        self._callback = callback
        self._started = self.clock()
        self._deadline = self._started + ms / 1000
        if self.finished:
            self._deliver()
            return
        try:
            if self.current is None:
                depth = self.start_depth if self.completed is None else self.completed.depth + 1
                self.current = self._start_pass(depth)
            else:
                self.current.claim(self)
                self.current.on_resume = self._schedule
        except Exception:
            self._abandon()
            raise
        self._run()

    def _start_pass(self, depth: int) -> Engine:
        engine = Engine(self.model)
        engine.setup(state=self.state, depth=depth)
        engine.claim(self)
        engine.on_resume = self._schedule
        return engine

    def _schedule(self) -> None:
        self.scheduler(self._run)

    def _abandon(self) -> None:
        # A pass that failed mid-step is dropped and restarted by the next call
        self._callback = None
        if self.current is not None:
            self.current.release(self)
            self.current = None

    def _run(self) -> None:
        if self._callback is None or self.current is None:
            return
        try:
            self._run_slice()
        except Exception:
            self._abandon()
            raise

    def _run_slice(self) -> None:
        """Step until the deadline, a finished pass, or SLICE_STEPS steps.

        Between passes and between long runs of steps the rest of the work is
        handed to the scheduler.
        """
        engine = self.current
        assert engine is not None
        steps = 0
        while True:
            status = engine.advance()
            steps += 1
            if status is StepStatus.AWAITING_SCORE:
                return
            if status is StepStatus.COMPLETED:
                engine.release(self)
                self._record(engine)
                if self.finished:
                    self.current = None
                    self._deliver()
                    return
                assert engine.depth is not None
                self.current = self._start_pass(engine.depth + 1)
                if self.clock() >= self._deadline:
                    self._deliver()
                else:
                    self._schedule()
                return
            if self.clock() >= self._deadline:
                self._deliver()
                return
            if steps >= SLICE_STEPS:
                self._schedule()
                return

    def _record(self, engine: Engine) -> None:
        self.completed = engine
        self.history.append(
            {
                "depth": engine.depth,
                "nodes": engine.stats.nodes,
                "leaves": engine.stats.leaves,
                "cutoffs": engine.stats.cutoffs,
            }
        )
        logger.debug(
            "depth %s complete best_score=%s nodes=%d",
            engine.depth,
            engine.best_score(),
            engine.stats.nodes,
        )

    def _deliver(self) -> None:
        callback, self._callback = self._callback, None
        incomplete: Optional[IncompletePass] = None
        if self.current is not None:
            self.current.release(self)
            assert self.current.depth is not None
            incomplete = IncompletePass(depth=self.current.depth, engine=self.current)
        completed = self.completed
        result = DeepeningResult(
            depth=completed.depth if completed is not None else None,
            engine=completed,
            incomplete=incomplete,
            time_ms=int((self.clock() - self._started) * 1000),
        )
        logger.info(
            "deepening stopped depth=%s incomplete_depth=%s time_ms=%d",
            result.depth,
            incomplete.depth if incomplete is not None else None,
            result.time_ms,
        )
        if callback is not None:
            callback(result)
