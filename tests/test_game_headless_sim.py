from __future__ import annotations

import threading

from math_grid.clock import FakeClock
from math_grid.config import GameConfig
from math_grid.game import MathGridGame, build_math_grid_game
from math_grid.grid_core import GridPos, MoveOutcome


def _adjacent_answer(game: MathGridGame) -> tuple[GridPos, int]:
    snap = game.snapshot().board
    target = snap.player.neighbors()[0]
    problem = snap.problem_at(target)
    assert problem is not None
    return target, problem.answer


def _assert_board_ok(game: MathGridGame) -> None:
    board = game.snapshot().board
    answers = board.answers()
    assert len(answers) == 8
    assert len(set(answers)) == 8
    assert board.occupied() == [board.player]


def test_headless_scripted_run_produces_expected_totals() -> None:
    clock = FakeClock()
    game = build_math_grid_game(clock=clock, seed=555)

    for _ in range(10):
        clock.advance(0.5)
        _, answer = _adjacent_answer(game)
        assert game.submit_answer(str(answer)).accepted

    # Ten moves of +1 health against five one-second ticks.
    assert game.get_health() == 105
    assert game.get_score() == 10
    assert game.moves == 10
    assert game.is_running()
    _assert_board_ok(game)


def test_same_seed_reproduces_the_board() -> None:
    g1 = MathGridGame(clock=FakeClock(), seed=99)
    g2 = MathGridGame(clock=FakeClock(), seed=99)
    assert g1.snapshot().board == g2.snapshot().board
    assert g1.seed == 99


def test_run_ends_when_health_decays_to_zero() -> None:
    clock = FakeClock()
    game = build_math_grid_game(clock=clock, seed=1, config=GameConfig(start_health=5))

    clock.advance(4.0)
    game.update()
    assert game.get_health() == 1
    assert game.is_running()

    clock.advance(1.0)
    game.update()
    assert game.get_health() == 0
    assert not game.is_running()
    assert not game.ticking

    _, answer = _adjacent_answer(game)
    before = game.snapshot()
    result = game.submit_answer(str(answer))
    assert result.outcome is MoveOutcome.NOT_RUNNING
    assert game.snapshot() == before


def test_tick_due_before_submit_is_applied_first() -> None:
    clock = FakeClock()
    game = build_math_grid_game(clock=clock, seed=8, config=GameConfig(start_health=1))
    _, answer = _adjacent_answer(game)

    # The fatal tick and the answer arrive in the same frame; the tick wins.
    clock.advance(1.0)
    result = game.submit_answer(str(answer))

    assert result.outcome is MoveOutcome.NOT_RUNNING
    assert game.get_health() == 0
    assert game.get_score() == 0


def test_submit_just_before_fatal_tick_is_accepted() -> None:
    clock = FakeClock()
    game = build_math_grid_game(clock=clock, seed=8, config=GameConfig(start_health=1))
    target, answer = _adjacent_answer(game)

    clock.advance(0.75)
    result = game.submit_answer(str(answer))
    assert result.accepted
    assert result.new_position == target
    assert game.get_health() == 2

    clock.advance(0.25)
    game.update()
    assert game.get_health() == 1
    assert game.is_running()


def test_reset_after_game_over_restores_defaults_and_fresh_board() -> None:
    clock = FakeClock()
    game = build_math_grid_game(clock=clock, seed=4)
    _, answer = _adjacent_answer(game)
    game.submit_answer(answer)

    clock.advance(200.0)
    game.update()
    assert game.get_health() == 0
    assert not game.is_running()

    board = game.reset(seed=12)

    assert game.get_health() == 100
    assert game.get_score() == 0
    assert game.is_running()
    assert game.moves == 0
    assert game.seed == 12
    assert game.ticking
    assert board.player == GridPos(1, 1)
    _assert_board_ok(game)

    clock.advance(1.0)
    assert game.update() == 1
    assert game.get_health() == 99


def test_reset_without_seed_draws_a_new_one() -> None:
    game = MathGridGame(clock=FakeClock(), seed=3)
    game.reset()
    assert isinstance(game.seed, int)
    _assert_board_ok(game)


def test_stop_ticking_freezes_health() -> None:
    clock = FakeClock()
    game = build_math_grid_game(clock=clock, seed=2)
    game.stop_ticking()

    clock.advance(30.0)
    game.update()

    assert game.get_health() == 100
    assert game.is_running()


def test_initialize_redeals_and_clears_move_count() -> None:
    game = MathGridGame(clock=FakeClock(), seed=6)
    _, answer = _adjacent_answer(game)
    game.submit_answer(answer)
    assert game.moves == 1

    board = game.initialize(seed=6)

    assert game.moves == 0
    assert board.player == GridPos(1, 1)
    assert board == MathGridGame(clock=FakeClock(), seed=6).snapshot().board


def test_oversized_numeric_input_is_rejected_by_the_facade() -> None:
    clock = FakeClock()
    game = build_math_grid_game(clock=clock, seed=1)
    before = game.snapshot()

    result = game.submit_answer("1" * 4301)

    assert result.outcome is MoveOutcome.INVALID_INPUT
    assert game.snapshot() == before


def test_run_accessors_wait_for_in_flight_mutations() -> None:
    game = MathGridGame(clock=FakeClock(), seed=5)
    seen: list[int] = []

    def reader() -> None:
        seen.append(game.get_health())

    with game._lock:
        t = threading.Thread(target=reader)
        t.start()
        t.join(timeout=0.2)
        assert seen == []
        game.run_state.decrease_health(10)
    t.join(timeout=2.0)

    assert seen == [90]
    assert game.get_score() == 0
    assert game.is_running()
