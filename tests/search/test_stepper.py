from __future__ import annotations

import asyncio
from typing import Callable, List

import pytest

from alphabeta.errors import ConfigurationError, StaleInstanceReuse
from alphabeta.games.chomp import Chomp, ChompState
from alphabeta.search.engine import Engine
from alphabeta.search.service import AlphaBeta
from alphabeta.search.stepper import InlineScheduler, TimeSlicedStepper, asyncio_scheduler


EXPECTED_BEST = ChompState(line_length=8, player="second", chomped_length=2)


class ManualScheduler:
    def __init__(self) -> None:
        self.tasks: List[Callable[[], None]] = []

    def __call__(self, task: Callable[[], None]) -> None:
        self.tasks.append(task)

    def run_all(self) -> None:
        while self.tasks:
            self.tasks.pop(0)()


def test_complete_chomp_in_half_a_second(chomp: Chomp) -> None:
    search = AlphaBeta(chomp).setup(state=chomp.initial_state(), depth=10)
    calls = []
    search.step_for_budget(500, calls.append)

    assert calls == [EXPECTED_BEST]
    assert search.prediction().state == ChompState(
        line_length=0, player="second", chomped_length=3
    )


def test_exhausted_budget_still_completes_once(chomp: Chomp, tick_clock) -> None:
    engine = Engine(chomp)
    engine.setup(state=chomp.initial_state(), depth=10)
    stepper = TimeSlicedStepper(engine, clock=tick_clock)
    calls = []
    stepper.step_for_budget(3, calls.append)

    assert calls == [EXPECTED_BEST]
    assert stepper.slices > 1
    assert not engine.busy


def test_slices_yield_to_scheduler(chomp: Chomp, tick_clock) -> None:
    engine = Engine(chomp)
    engine.setup(state=chomp.initial_state(), depth=10)
    scheduler = ManualScheduler()
    stepper = TimeSlicedStepper(engine, scheduler=scheduler, clock=tick_clock)
    calls = []
    stepper.step_for_budget(5, calls.append)

    assert calls == []
    assert len(scheduler.tasks) == 1
    with pytest.raises(StaleInstanceReuse):
        engine.step()
    with pytest.raises(StaleInstanceReuse):
        TimeSlicedStepper(engine).step_for_budget(5, calls.append)

    scheduler.run_all()
    assert calls == [EXPECTED_BEST]


def test_cancel_between_slices_skips_callback(chomp: Chomp, tick_clock) -> None:
    engine = Engine(chomp)
    engine.setup(state=chomp.initial_state(), depth=10)
    scheduler = ManualScheduler()
    stepper = TimeSlicedStepper(engine, scheduler=scheduler, clock=tick_clock)
    calls = []
    stepper.step_for_budget(2, calls.append)
    stepper.cancel()
    scheduler.run_all()

    assert calls == []
    assert not engine.busy
    assert not engine.is_complete


def test_asyncio_scheduler_runs_slices_on_the_loop(chomp: Chomp) -> None:
    async def main() -> ChompState:
        loop = asyncio.get_running_loop()
        done: asyncio.Future = loop.create_future()
        search = AlphaBeta(chomp).setup(state=chomp.initial_state(), depth=10)
        search.step_for_budget(0, done.set_result, scheduler=asyncio_scheduler(loop))
        return await done

    assert asyncio.run(main()) == EXPECTED_BEST


def test_deferred_scores_resume_slices(deferred_chomp) -> None:
    engine = Engine(deferred_chomp)
    engine.setup(state=deferred_chomp.initial_state(), depth=10)
    calls = []
    TimeSlicedStepper(engine).step_for_budget(50, calls.append)
    assert calls == []

    deferred_chomp.flush()
    assert calls == [EXPECTED_BEST]


@pytest.mark.parametrize("budget", [-1, 2.5, "10"])
def test_invalid_budget_rejected(chomp: Chomp, budget) -> None:
    engine = Engine(chomp)
    engine.setup(state=chomp.initial_state(), depth=2)
    with pytest.raises(ConfigurationError):
        TimeSlicedStepper(engine).step_for_budget(budget, lambda best: None)
    assert not engine.busy


def test_inline_scheduler_queues_nested_tasks() -> None:
    scheduler = InlineScheduler()
    order = []

    def outer() -> None:
        order.append("outer-start")
        scheduler(lambda: order.append("inner"))
        order.append("outer-end")

    scheduler(outer)
    assert order == ["outer-start", "outer-end", "inner"]


def test_error_in_first_slice_releases_engine(flaky_chomp) -> None:
    engine = Engine(flaky_chomp)
    engine.setup(state=flaky_chomp.initial_state(), depth=10)
    stepper = TimeSlicedStepper(engine)
    calls = []
    with pytest.raises(RuntimeError):
        stepper.step_for_budget(500, calls.append)
    assert not engine.busy

    engine.setup(state=flaky_chomp.initial_state(), depth=10)
    stepper.step_for_budget(500, calls.append)
    assert calls == [EXPECTED_BEST]


def test_error_in_later_slice_releases_engine(flaky_chomp_factory, clock_factory) -> None:
    game = flaky_chomp_factory(fail_on=20)
    engine = Engine(game)
    engine.setup(state=game.initial_state(), depth=10)
    scheduler = ManualScheduler()
    stepper = TimeSlicedStepper(engine, scheduler=scheduler, clock=clock_factory())
    calls = []
    stepper.step_for_budget(2, calls.append)
    assert engine.busy

    with pytest.raises(RuntimeError):
        scheduler.run_all()
    assert not engine.busy
    assert calls == []

    # No further slices are scheduled for the failed call
    scheduler.run_all()
    assert calls == []

    engine.setup(state=game.initial_state(), depth=10)
    TimeSlicedStepper(engine).step_for_budget(500, calls.append)
    assert calls == [EXPECTED_BEST]
