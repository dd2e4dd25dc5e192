from __future__ import annotations

from typing import Any

from ..errors import ConfigurationError
from ..model import load_model


def perft(model: Any, state: Any, depth: int) -> int:
    """Count the leaves of the full-width tree below `state`.

    Definition:
    - depth == 0 or a won state counts as one leaf.
    - otherwise the sum over all children's perft(depth - 1); a state with
      no moves contributes nothing.

    An unpruned search scores exactly this many leaves, so it bounds
    `SearchStats.leaves` for the same depth.
    """
    if depth < 0:
        raise ConfigurationError("depth must be >= 0")
    rules = load_model(model)
    return _perft(rules, state, depth)


def _perft(rules: Any, state: Any, depth: int) -> int:
    if depth == 0 or rules.check_win_conditions(state):
        return 1
    nodes = 0
    for child in rules.generate_moves(state):
        nodes += _perft(rules, child, depth - 1)
    return nodes
