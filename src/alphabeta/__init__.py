"""Resumable alpha-beta search over caller-supplied game rules."""

from __future__ import annotations

from .errors import ConfigurationError, SearchError, SearchStateError, StaleInstanceReuse
from .model import FunctionModel, GameModel, load_model
from .search import AlphaBeta, DeepeningResult, Engine, Prediction, StepStatus

__all__ = [
    "AlphaBeta",
    "ConfigurationError",
    "DeepeningResult",
    "Engine",
    "FunctionModel",
    "GameModel",
    "Prediction",
    "SearchError",
    "SearchStateError",
    "StaleInstanceReuse",
    "StepStatus",
    "load_model",
]

__version__ = "0.1.0"
