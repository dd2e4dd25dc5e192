from __future__ import annotations

from typing import Any, List

import pytest

from alphabeta.games.perft import perft
from alphabeta.games.tictactoe import TicTacToe, TicTacToeState
from alphabeta.search.engine import NO_MOVES_SCORE, WIN_SCORE, Engine, leaf_value


def _score(model: Any, state: Any) -> float:
    out: List[float] = []
    model.score_function(state, out.append)
    return out[0]


def minimax(model: Any, state: Any, depth: int, ply: int = 0) -> float:
    """Full-width reference search with the engine's leaf conventions."""
    if model.check_win_conditions(state):
        return leaf_value(_score(model, state), ply, True)
    if depth == 0:
        return leaf_value(_score(model, state), ply, False)
    moves = model.generate_moves(state)
    if not moves:
        return NO_MOVES_SCORE
    values = [minimax(model, m, depth - 1, ply + 1) for m in moves]
    return max(values) if ply % 2 == 0 else min(values)


POSITIONS = [
    ("X...O....", "X"),
    ("X.O.X....", "O"),
    ("XO..X..O.", "X"),
    ("XX.OO....", "X"),
]


@pytest.mark.parametrize("cells,me", POSITIONS)
@pytest.mark.parametrize("depth", [1, 2, 3, 9])
def test_root_value_matches_full_width_minimax(cells: str, me: str, depth: int) -> None:
    game = TicTacToe(me=me, start=cells)
    state = game.initial_state()
    engine = Engine(game)
    engine.setup(state=state, depth=depth)
    engine.run()

    expected = minimax(game, state, depth)
    assert engine.best_score() == expected

    # The chosen move achieves the root value
    best = engine.best()
    assert best is not None
    assert minimax(game, best, depth - 1, ply=1) == expected
    assert engine.stats.leaves <= perft(game, state, depth)


def test_takes_immediate_win() -> None:
    game = TicTacToe(me="X", start="XX.OO....")
    engine = Engine(game)
    engine.setup(state=game.initial_state(), depth=4)
    engine.run()
    assert engine.best().last == 2
    assert engine.best_score() == WIN_SCORE - 1
    assert engine.prediction().chain == (engine.best(),)


def test_only_center_reply_draws_against_corner_opening() -> None:
    game = TicTacToe(me="O", start="X........")
    state = game.initial_state()
    assert state.to_move == "O"
    engine = Engine(game)
    engine.setup(state=state, depth=8)
    engine.run()
    assert engine.best().last == 4
    assert engine.best_score() == 0
    final = engine.prediction().state
    assert isinstance(final, TicTacToeState)
    assert "." not in final.to_string()
