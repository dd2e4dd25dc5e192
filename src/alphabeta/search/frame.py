from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from ..errors import SearchStateError


@dataclass(eq=False)
class Frame:
    """One node of a depth-first alpha-beta traversal.

    Attributes:
        state: Game state this node represents.
        depth: Remaining depth budget.
        ply: Distance from the root; even plies maximize.
        alpha, beta: Current search window.
        moves: Candidate states, generated once on first visit.
        cursor: Index of the next move to visit.
        best_score, best_child: Best child value and frame folded so far.
        value: Final value once the frame has been popped.
        terminal: Whether the win test held for `state`.
    """

    state: Any
    depth: int
    ply: int = 0
    alpha: float = -math.inf
    beta: float = math.inf
    moves: Optional[List[Any]] = None
    cursor: int = 0
    best_score: Optional[float] = None
    best_child: Optional["Frame"] = None
    value: Optional[float] = None
    terminal: bool = False

    @property
    def maximizing(self) -> bool:
        return self.ply % 2 == 0

    @property
    def exhausted(self) -> bool:
        return self.moves is not None and self.cursor >= len(self.moves)

    @property
    def cut(self) -> bool:
        return self.alpha >= self.beta

    def next_child(self) -> "Frame":
        """Create the frame for the move at the cursor and advance the cursor."""
        if self.moves is None or self.cursor >= len(self.moves):
            raise SearchStateError("frame has no untried moves")
        move = self.moves[self.cursor]
        self.cursor += 1
        return Frame(
            state=move,
            depth=self.depth - 1,
            ply=self.ply + 1,
            alpha=self.alpha,
            beta=self.beta,
        )

    def fold(self, child: "Frame") -> None:
        """Fold a finished child's value into this frame's best and window.

        Only a strictly better value replaces the best child, so the first
        move found wins ties.
        """
        value = child.value
        if value is None:
            raise SearchStateError("cannot fold a child that has not been valued")
        if self.maximizing:
            if self.best_score is None or value > self.best_score:
                self.best_score = value
                self.best_child = child
            if value > self.alpha:
                self.alpha = value
        else:
            if self.best_score is None or value < self.best_score:
                self.best_score = value
                self.best_child = child
            if value < self.beta:
                self.beta = value


class FrameStack:
    """Root-to-active sequence of frames.

    Pushing a child and popping a finished frame are the only mutations.
    """

    def __init__(self) -> None:
        self._frames: List[Frame] = []

    def push(self, frame: Frame) -> None:
        if self._frames and frame.depth != self._frames[-1].depth - 1:
            raise ValueError("child depth must be one less than its parent's")
        self._frames.append(frame)

    def pop(self) -> Frame:
        return self._frames.pop()

    @property
    def active(self) -> Frame:
        return self._frames[-1]

    @property
    def parent(self) -> Optional[Frame]:
        return self._frames[-2] if len(self._frames) > 1 else None

    def states(self) -> List[Any]:
        """States from the root to the active frame."""
        return [f.state for f in self._frames]

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)
