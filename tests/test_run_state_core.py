from __future__ import annotations

import pytest

from math_grid.run_state import RunSnapshot, RunState


def test_defaults() -> None:
    run = RunState()
    assert run.snapshot() == RunSnapshot(health=100, score=0, is_running=True)


def test_health_reaches_zero_exactly_on_hundredth_decrease() -> None:
    run = RunState()

    for i in range(1, 101):
        run.decrease_health(1)
        if i < 100:
            assert run.health == 100 - i
            assert run.is_running
    assert run.health == 0
    assert not run.is_running

    for _ in range(5):
        run.decrease_health(1)
        assert run.health == 0
        assert not run.is_running


def test_large_decrease_clamps_at_zero() -> None:
    run = RunState(start_health=10)
    run.decrease_health(25)
    assert run.health == 0
    assert not run.is_running


def test_health_and_score_are_unbounded_above() -> None:
    run = RunState()
    run.increase_health(1_000)
    run.increase_score(12_345)
    assert run.health == 1_100
    assert run.score == 12_345


def test_stopped_run_only_restarts_on_reset() -> None:
    run = RunState(start_health=2)
    run.increase_score(4)
    run.decrease_health(2)
    assert not run.is_running

    run.set_running(True)
    assert not run.is_running

    run.reset()
    assert run.snapshot() == RunSnapshot(health=2, score=0, is_running=True)


def test_set_running_toggles_while_health_remains() -> None:
    run = RunState()
    run.set_running(False)
    assert not run.is_running
    run.set_running(True)
    assert run.is_running


def test_negative_amounts_raise() -> None:
    run = RunState()
    with pytest.raises(ValueError):
        run.decrease_health(-1)
    with pytest.raises(ValueError):
        run.increase_health(-1)
    with pytest.raises(ValueError):
        run.increase_score(-1)
    with pytest.raises(ValueError):
        RunState(start_health=0)


def test_listeners_see_every_change_until_unsubscribed() -> None:
    run = RunState(start_health=3)
    seen: list[RunSnapshot] = []
    unsubscribe = run.subscribe(seen.append)

    run.decrease_health(1)
    run.increase_score(1)
    run.decrease_health(5)
    unsubscribe()
    run.reset()

    assert seen == [
        RunSnapshot(health=2, score=0, is_running=True),
        RunSnapshot(health=2, score=1, is_running=True),
        RunSnapshot(health=0, score=1, is_running=False),
    ]
