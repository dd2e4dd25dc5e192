from __future__ import annotations

import os
import sys
from typing import Any, Callable

import pytest


# Ensure the repository's src/ is on sys.path for `from alphabeta...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_PATH = os.path.abspath(os.path.join(REPO_ROOT, "src"))
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from alphabeta.games.chomp import Chomp  # noqa: E402


class TickClock:
    """Deterministic clock: every reading advances by `tick_ms`."""

    def __init__(self, tick_ms: float = 1.0) -> None:
        self.now = 0.0
        self.tick = tick_ms / 1000

    def __call__(self) -> float:
        self.now += self.tick
        return self.now


class DeferredChomp(Chomp):
    """Chomp whose scores are reported later, by `flush()`."""

    def __init__(self, line_length: int = 10) -> None:
        super().__init__(line_length=line_length)
        object.__setattr__(self, "pending", [])

    def score_function(self, state: Any, report: Callable[[float], None]) -> None:
        self.pending.append((state, report))

    def flush(self) -> int:
        n = 0
        while self.pending:
            _, report = self.pending.pop(0)
            report(0)
            n += 1
        return n


class FlakyChomp(Chomp):
    """Chomp whose move generation fails once, on call number `fail_on`."""

    def __init__(self, fail_on: int = 1) -> None:
        super().__init__(line_length=10)
        object.__setattr__(self, "fail_on", fail_on)
        object.__setattr__(self, "calls", 0)

    def generate_moves(self, state: Any) -> Any:
        object.__setattr__(self, "calls", self.calls + 1)
        if self.calls == self.fail_on:
            raise RuntimeError("move generator failed")
        return super().generate_moves(state)


@pytest.fixture
def chomp() -> Chomp:
    return Chomp(line_length=10)


@pytest.fixture
def tick_clock() -> TickClock:
    return TickClock()


@pytest.fixture
def deferred_chomp() -> DeferredChomp:
    return DeferredChomp()


@pytest.fixture
def flaky_chomp() -> FlakyChomp:
    return FlakyChomp()


@pytest.fixture
def flaky_chomp_factory() -> Callable[..., FlakyChomp]:
    return FlakyChomp


@pytest.fixture
def clock_factory() -> Callable[..., TickClock]:
    return TickClock
