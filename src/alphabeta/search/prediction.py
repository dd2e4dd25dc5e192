from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .frame import Frame


@dataclass(frozen=True)
class Prediction:
    """Anticipated line of play from a completed pass.

    Attributes:
        chain: States along the best path, first move first.
        score: Root value of the pass that produced the chain.
    """

    chain: Tuple[Any, ...] = ()
    score: Optional[float] = None

    @property
    def state(self) -> Any:
        """Last state of the line, or None for an empty prediction."""
        return self.chain[-1] if self.chain else None

    @property
    def next_state(self) -> Any:
        return self.chain[0] if self.chain else None

    def __len__(self) -> int:
        return len(self.chain)


def build_prediction(root: Optional[Frame]) -> Prediction:
    """Follow best children from a finished root frame.

    Returns an empty prediction if `root` is None or has not been valued.
    """
    if root is None or root.value is None:
        return Prediction()
    chain = []
    frame = root.best_child
    while frame is not None:
        chain.append(frame.state)
        frame = frame.best_child
    return Prediction(chain=tuple(chain), score=root.value)
