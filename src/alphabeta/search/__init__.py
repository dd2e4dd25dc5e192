from __future__ import annotations

from .deepening import DeepeningResult, DeepeningSession, IncompletePass
from .engine import NO_MOVES_SCORE, WIN_SCORE, Engine, SearchStats, StepStatus, leaf_value
from .frame import Frame, FrameStack
from .prediction import Prediction, build_prediction
from .service import AlphaBeta
from .stepper import InlineScheduler, TimeSlicedStepper, asyncio_scheduler

__all__ = [
    "AlphaBeta",
    "DeepeningResult",
    "DeepeningSession",
    "Engine",
    "Frame",
    "FrameStack",
    "IncompletePass",
    "InlineScheduler",
    "NO_MOVES_SCORE",
    "Prediction",
    "SearchStats",
    "StepStatus",
    "TimeSlicedStepper",
    "WIN_SCORE",
    "asyncio_scheduler",
    "build_prediction",
    "leaf_value",
]
