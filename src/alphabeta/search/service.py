from __future__ import annotations

import time
from typing import Any, Callable, Optional

from ..errors import SearchStateError
from ..model import GameModel, load_model
from .deepening import DeepeningResult, DeepeningSession
from .engine import Engine, StepStatus
from .prediction import Prediction
from .stepper import Clock, Scheduler, TimeSlicedStepper


class AlphaBeta:
    """Search facade bound to one game model.

    Usage::

        search = AlphaBeta(model)
        search.setup(state=initial, depth=10)
        search.run_to_completion(lambda best: ...)

    The engine, stepper, and deepening session share the same setup. Calls on
    one instance must not overlap.
    """

    def __init__(
        self,
        model: Any,
        *,
        scheduler: Optional[Scheduler] = None,
        clock: Clock = time.perf_counter,
        max_depth: Optional[int] = None,
    ) -> None:
        self.model: GameModel = load_model(model)
        self.engine = Engine(self.model)
        self.scheduler = scheduler
        self.clock = clock
        self.max_depth = max_depth
        self.session: Optional[DeepeningSession] = None
        self._state: Any = None
        self._depth: Optional[int] = None

    def setup(self, *, state: Any, depth: int) -> "AlphaBeta":
        self.engine.setup(state=state, depth=depth)
        self._state = state
        self._depth = depth
        self.session = None
        return self

    @property
    def state(self) -> Any:
        return self._state

    @property
    def depth(self) -> Optional[int]:
        return self._depth

    def step(self) -> StepStatus:
        return self.engine.step()

    def run(self) -> StepStatus:
        return self.engine.run()

    def run_to_completion(self, callback: Callable[[Any], None]) -> None:
        self.engine.run_to_completion(callback)

    def step_for_budget(
        self,
        milliseconds: int,
        callback: Callable[[Any], None],
        *,
        scheduler: Optional[Scheduler] = None,
    ) -> TimeSlicedStepper:
        stepper = TimeSlicedStepper(self.engine, scheduler or self.scheduler, self.clock)
        stepper.step_for_budget(milliseconds, callback)
        return stepper

    def increment_depth_for_budget(
        self,
        milliseconds: int,
        callback: Callable[[DeepeningResult], None],
        *,
        scheduler: Optional[Scheduler] = None,
    ) -> DeepeningSession:
        if self._depth is None:
            raise SearchStateError("setup() must be called before deepening")
        if self.session is None:
            self.session = DeepeningSession(
                self.model,
                self._state,
                start_depth=self._depth,
                max_depth=self.max_depth,
                scheduler=scheduler or self.scheduler,
                clock=self.clock,
            )
        elif scheduler is not None:
            self.session.scheduler = scheduler
        self.session.increment_depth_for_budget(milliseconds, callback)
        return self.session

    def best(self) -> Any:
        return self.engine.best()

    def best_score(self) -> Optional[float]:
        return self.engine.best_score()

    def prediction(self) -> Prediction:
        return self.engine.prediction()
