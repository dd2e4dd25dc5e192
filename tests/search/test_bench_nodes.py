from __future__ import annotations

import importlib.util
import os

import pytest


BENCH_PATH = os.path.join(os.path.dirname(__file__), os.pardir, os.pardir, "scripts", "bench.py")


def _load_bench():
    spec = importlib.util.spec_from_file_location("bench", BENCH_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.bench
@pytest.mark.parametrize("game,depth", [("chomp", 8), ("tictactoe", 4)])
def test_pruning_scores_no_more_leaves_than_full_width(game: str, depth: int) -> None:
    bench = _load_bench()
    row = bench.bench_depth(game, depth)
    assert row["depth"] == depth
    assert row["leaves"] <= row["full_width_leaves"]
    assert row["nodes"] >= row["leaves"]
