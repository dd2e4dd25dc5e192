from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..model import ScoreReporter


EMPTY = "."
LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


@dataclass(frozen=True)
class TicTacToeState:
    board: Tuple[str, ...] = (EMPTY,) * 9
    to_move: str = "X"
    last: Optional[int] = None  # square played to reach this state

    @classmethod
    def from_string(cls, cells: str, to_move: Optional[str] = None) -> "TicTacToeState":
        """Parse nine cells such as ``"X.O......"``; side to move defaults by count."""
        cells = cells.replace(" ", "").replace("/", "")
        if len(cells) != 9 or any(c not in "XO." for c in cells):
            raise ValueError("expected nine cells of 'X', 'O' or '.'")
        if to_move is None:
            to_move = "X" if cells.count("X") <= cells.count("O") else "O"
        return cls(board=tuple(cells), to_move=to_move)

    def to_string(self) -> str:
        return "".join(self.board)


def winner(board: Tuple[str, ...]) -> Optional[str]:
    for a, b, c in LINES:
        if board[a] != EMPTY and board[a] == board[b] == board[c]:
            return board[a]
    return None


@dataclass(frozen=True)
class TicTacToe:
    """Tic-tac-toe scored from `me`'s point of view.

    `me` is the side to move in `start`, which the engine maximizes for.

    Depth-limited positions score the number of lines still open for `me`
    minus those open for the opponent. A full board without a line has no
    moves and is valued as a draw by the engine.
    """

    me: Optional[str] = None
    start: str = EMPTY * 9

    def __post_init__(self) -> None:
        to_move = TicTacToeState.from_string(self.start).to_move
        if self.me is None:
            object.__setattr__(self, "me", to_move)
        elif self.me not in ("X", "O"):
            raise ValueError("me must be 'X' or 'O'")
        elif self.me != to_move:
            raise ValueError(f"me must be the side to move in start ({to_move})")

    def initial_state(self) -> TicTacToeState:
        return TicTacToeState.from_string(self.start)

    def generate_moves(self, state: TicTacToeState) -> List[TicTacToeState]:
        nxt = "O" if state.to_move == "X" else "X"
        moves = []
        for sq, cell in enumerate(state.board):
            if cell != EMPTY:
                continue
            board = state.board[:sq] + (state.to_move,) + state.board[sq + 1 :]
            moves.append(TicTacToeState(board=board, to_move=nxt, last=sq))
        return moves

    def check_win_conditions(self, state: TicTacToeState) -> bool:
        return winner(state.board) is not None

    def score_function(self, state: TicTacToeState, report: ScoreReporter) -> None:
        if winner(state.board) is not None:
            # Wins are valued by the engine
            report(0)
            return
        other = "O" if self.me == "X" else "X"
        mine = theirs = 0
        for line in LINES:
            cells = {state.board[i] for i in line}
            if other not in cells:
                mine += 1
            if self.me not in cells:
                theirs += 1
        report(mine - theirs)
