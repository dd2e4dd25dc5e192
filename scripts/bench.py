#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import platform
import sys
import time
from typing import Any, Dict, List, Optional

# Ensure src/ is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC_PATH = os.path.join(REPO_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from alphabeta.games import GAMES, create_game, perft
from alphabeta.search.service import AlphaBeta


def bench_depth(game: str, depth: int, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Search one bundled game to `depth` and report node counts and timing."""
    model = create_game(game, params)
    state = model.initial_state()
    search = AlphaBeta(model).setup(state=state, depth=depth)
    best: List[Any] = []
    t0 = time.perf_counter()
    search.run_to_completion(best.append)
    time_ms = int((time.perf_counter() - t0) * 1000)
    stats = search.engine.stats
    return {
        "game": game,
        "depth": depth,
        "best_move": repr(best[0]) if best else None,
        "score": search.best_score(),
        "time_ms": time_ms,
        "nodes": stats.nodes,
        "leaves": stats.leaves,
        "cutoffs": stats.cutoffs,
        "full_width_leaves": perft(model, state, depth),
        "nps": int(stats.nodes * 1000 / max(1, time_ms)),
    }


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Benchmark the search over bundled games")
    parser.add_argument("--game", choices=sorted(GAMES), default="chomp")
    parser.add_argument("--max-depth", type=int, default=10, help="Search depths 1..N")
    parser.add_argument("--params", type=str, default=None, help="Game parameters as JSON")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    args = parser.parse_args(argv)

    params = json.loads(args.params) if args.params else None
    results = [bench_depth(args.game, d, params) for d in range(1, max(1, args.max_depth) + 1)]
    out = {
        "python": platform.python_version(),
        "platform": platform.platform(),
        "results": results,
    }
    print(json.dumps(out, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
