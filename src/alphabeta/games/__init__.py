"""Bundled game models."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import ConfigurationError
from .chomp import Chomp, ChompState
from .perft import perft
from .tictactoe import TicTacToe, TicTacToeState


GAMES: Dict[str, Callable[..., Any]] = {
    "chomp": Chomp,
    "tictactoe": TicTacToe,
}


def create_game(name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
    """Build a bundled game model by name.

    Raises:
        KeyError: Unknown game name.
        ConfigurationError: Parameters rejected by the game.
    """
    factory = GAMES[name]
    try:
        return factory(**dict(params or {}))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid parameters for {name}: {e}") from e


__all__ = [
    "Chomp",
    "ChompState",
    "GAMES",
    "TicTacToe",
    "TicTacToeState",
    "create_game",
    "perft",
]
