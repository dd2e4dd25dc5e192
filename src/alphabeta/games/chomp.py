from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..model import ScoreReporter


PLAYERS = ("first", "second")


@dataclass(frozen=True)
class ChompState:
    """Line of squares; each move chomps 1..max_chomp from the end.

    `player` is the side to move next. `chomped_length` is the size of the
    chomp that produced this state (None for the starting position).
    """

    line_length: int
    player: str = "first"
    chomped_length: Optional[int] = None


@dataclass(frozen=True)
class Chomp:
    """Subtraction game: whoever chomps the last square wins.

    Leaves are scored 0, so the search is decided by wins alone.
    """

    line_length: int = 10
    max_chomp: int = 3

    def __post_init__(self) -> None:
        if self.line_length < 0:
            raise ValueError("line_length must be >= 0")
        if self.max_chomp < 1:
            raise ValueError("max_chomp must be >= 1")

    def initial_state(self) -> ChompState:
        return ChompState(line_length=self.line_length, player=PLAYERS[0])

    def generate_moves(self, state: ChompState) -> List[ChompState]:
        nxt = PLAYERS[1] if state.player == PLAYERS[0] else PLAYERS[0]
        return [
            ChompState(line_length=state.line_length - n, player=nxt, chomped_length=n)
            for n in range(1, self.max_chomp + 1)
            if state.line_length >= n
        ]

    def check_win_conditions(self, state: ChompState) -> bool:
        return state.line_length == 0

    def score_function(self, state: ChompState, report: ScoreReporter) -> None:
        report(0)
