from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from ..errors import ConfigurationError, SearchStateError, StaleInstanceReuse
from ..model import GameModel, load_model
from .frame import Frame, FrameStack
from .prediction import Prediction, build_prediction


logger = logging.getLogger(__name__)

WIN_SCORE = 1_000_000  # wins are scored within +/- WIN_SCORE of the model's score
NO_MOVES_SCORE = 0


class StepStatus(Enum):
    CONTINUING = "continuing"
    COMPLETED = "completed"
    AWAITING_SCORE = "awaiting_score"


@dataclass
class SearchStats:
    nodes: int = 0  # frames created, root included
    leaves: int = 0  # scores requested
    cutoffs: int = 0  # frames abandoned with untried moves


def leaf_value(score: float, ply: int, terminal: bool) -> float:
    """Convert a reported score into a frame value.

    A terminal state is a win for the side that moved into it. Wins found
    closer to the root score higher and losses found further away score less
    badly.
    """
    if not terminal:
        return score
    if ply % 2 == 1:
        return score + (WIN_SCORE - ply)
    return score - (WIN_SCORE - ply)


class Engine:
    """Alpha-beta search over an explicit frame stack.

    Each call to `step` does one unit of work: generate a move list, push a
    child, or score a leaf and fold its value back into the parent. Frames on
    the best path stay reachable from `root` after the pass completes.
    """

    def __init__(self, model: Any) -> None:
        self.model: GameModel = load_model(model)
        self.stack = FrameStack()
        self.root: Optional[Frame] = None
        self.depth: Optional[int] = None
        self.stats = SearchStats()
        # Called when a deferred score report lets a stalled driver continue
        self.on_resume: Optional[Callable[[], None]] = None
        self._pending: Optional[Frame] = None
        self._requesting = False
        self._owner: Optional[object] = None

    # ---- Setup ----
    def setup(self, *, state: Any, depth: int) -> None:
        """Start a fresh pass at `state` searching `depth` plies."""
        if self._owner is not None:
            raise StaleInstanceReuse("engine is being driven; cannot set up a new pass")
        if state is None:
            raise ConfigurationError("state is required")
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise ConfigurationError("depth must be an integer >= 0")
        self.stack = FrameStack()
        self.root = Frame(state=state, depth=depth)
        self.stack.push(self.root)
        self.depth = depth
        self.stats = SearchStats(nodes=1)
        self._pending = None

    # ---- Ownership ----
    def claim(self, owner: object) -> None:
        """Reserve the engine for a driver until `release`."""
        if self._owner is not None and self._owner is not owner:
            raise StaleInstanceReuse("engine is already being driven by another call")
        self._owner = owner

    def release(self, owner: object) -> None:
        if self._owner is owner:
            self._owner = None
            self.on_resume = None

    @property
    def busy(self) -> bool:
        return self._owner is not None

    # ---- Stepping ----
    def step(self) -> StepStatus:
        if self._owner is not None:
            raise StaleInstanceReuse("engine is being driven; step() is not allowed")
        return self.advance()

    def run(self) -> StepStatus:
        """Step until the pass completes or a score report is outstanding."""
        if self._owner is not None:
            raise StaleInstanceReuse("engine is being driven; run() is not allowed")
        return self.drive()

    def drive(self) -> StepStatus:
        status = self.advance()
        while status is StepStatus.CONTINUING:
            status = self.advance()
        return status

    def advance(self) -> StepStatus:
        """One unit of work, on behalf of whichever driver owns the engine."""
        if self.root is None:
            raise SearchStateError("setup() must be called before stepping")
        if self._pending is not None:
            return StepStatus.AWAITING_SCORE
        if not self.stack:
            return StepStatus.COMPLETED

        frame = self.stack.active
        if frame.moves is None:
            if self.model.check_win_conditions(frame.state):
                frame.terminal = True
                return self._request_score(frame)
            if frame.depth == 0:
                return self._request_score(frame)
            frame.moves = list(self.model.generate_moves(frame.state))
            return StepStatus.CONTINUING

        if frame.exhausted or frame.cut:
            if not frame.exhausted:
                self.stats.cutoffs += 1
            value = frame.best_score if frame.best_score is not None else NO_MOVES_SCORE
            return self._finish(frame, value)

        self.stack.push(frame.next_child())
        self.stats.nodes += 1
        return StepStatus.CONTINUING

    def _request_score(self, frame: Frame) -> StepStatus:
        self._pending = frame
        self.stats.leaves += 1
        reported = False

        def report(score: float) -> None:
            nonlocal reported
            if reported:
                raise SearchStateError("score already reported for this state")
            if self._pending is not frame:
                raise SearchStateError("score reported for a pass that is no longer active")
            reported = True
            self._receive(frame, score)

        self._requesting = True
        try:
            self.model.score_function(frame.state, report)
        except Exception:
            # The frame stays unscored and is requested again on the next step
            if self._pending is frame:
                self._pending = None
                self.stats.leaves -= 1
            raise
        finally:
            self._requesting = False

        if self._pending is frame:
            return StepStatus.AWAITING_SCORE
        return StepStatus.CONTINUING if self.stack else StepStatus.COMPLETED

    def _receive(self, frame: Frame, score: float) -> None:
        self._pending = None
        self._finish(frame, leaf_value(score, frame.ply, frame.terminal))
        if not self._requesting and self.on_resume is not None:
            self.on_resume()

    def _finish(self, frame: Frame, value: float) -> StepStatus:
        frame.value = value
        self.stack.pop()
        if not self.stack:
            logger.debug(
                "pass complete depth=%s score=%s nodes=%d leaves=%d cutoffs=%d",
                self.depth,
                value,
                self.stats.nodes,
                self.stats.leaves,
                self.stats.cutoffs,
            )
            return StepStatus.COMPLETED
        self.stack.active.fold(frame)
        return StepStatus.CONTINUING

    # ---- Drivers ----
    def run_to_completion(self, callback: Callable[[Any], None]) -> None:
        """Drive the pass to completion and call `callback(best)` once.

        With a model that reports synchronously the callback fires before this
        returns; otherwise it fires from the late report.
        """
        token = object()
        self.claim(token)

        def resume() -> None:
            try:
                status = self.drive()
            except Exception:
                self.release(token)
                raise
            if status is StepStatus.COMPLETED:
                self.release(token)
                callback(self.best())

        self.on_resume = resume
        resume()

    # ---- Results ----
    @property
    def is_complete(self) -> bool:
        return self.root is not None and not self.stack and self._pending is None

    def best(self) -> Any:
        """Best move at the root, or None if incomplete or there were no moves."""
        if not self.is_complete or self.root is None or self.root.best_child is None:
            return None
        return self.root.best_child.state

    def best_score(self) -> Optional[float]:
        if not self.is_complete or self.root is None:
            return None
        return self.root.value

    def prediction(self) -> Prediction:
        return build_prediction(self.root if self.is_complete else None)
