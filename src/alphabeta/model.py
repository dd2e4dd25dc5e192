"""Game model contract.

The engine never inspects states or moves. A move is the state that results
from playing it, and whose turn it is follows from depth parity alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, Sequence

from .errors import ConfigurationError


ScoreReporter = Callable[[float], None]

REQUIRED_FUNCTIONS = ("score_function", "generate_moves", "check_win_conditions")


class GameModel(Protocol):
    """Rules supplied by the caller."""

    def generate_moves(self, state: Any) -> Sequence[Any]:
        """Return candidate next states in evaluation order (may be empty)."""
        ...

    def check_win_conditions(self, state: Any) -> bool:
        """Return True when the side that moved into `state` has won."""
        ...

    def score_function(self, state: Any, report: ScoreReporter) -> None:
        """Report a score for `state`; higher is better for the searching side.

        `report` may be called before returning or later, exactly once.
        """
        ...


@dataclass(frozen=True)
class FunctionModel:
    """Game model assembled from three plain functions."""

    score_function: Callable[[Any, ScoreReporter], None]
    generate_moves: Callable[[Any], Sequence[Any]]
    check_win_conditions: Callable[[Any], bool]


def load_model(source: Any) -> GameModel:
    """Validate `source` and return it as a game model.

    Args:
        source: An object exposing the three model functions, or a mapping
            from their names to callables.

    Returns:
        GameModel: `source` itself, or a FunctionModel built from the mapping.

    Raises:
        ConfigurationError: If any required function is missing or not callable.
    """
    if source is None:
        raise ConfigurationError("game model is required")
    if isinstance(source, Mapping):
        missing = [n for n in REQUIRED_FUNCTIONS if not callable(source.get(n))]
    else:
        missing = [n for n in REQUIRED_FUNCTIONS if not callable(getattr(source, n, None))]
    if missing:
        raise ConfigurationError(
            "game model is missing required function(s): " + ", ".join(missing)
        )
    if isinstance(source, Mapping):
        return FunctionModel(**{n: source[n] for n in REQUIRED_FUNCTIONS})
    return source
