from __future__ import annotations

import random

import pytest

from math_grid.grid_core import Operator
from math_grid.problems import ProblemGenerator, fallback_problem


def test_generator_determinism_same_seed_same_sequence() -> None:
    gen1 = ProblemGenerator(random.Random(123))
    gen2 = ProblemGenerator(random.Random(123))

    seq1 = [gen1.next_problem() for _ in range(50)]
    seq2 = [gen2.next_problem() for _ in range(50)]

    assert [(p.text, p.answer) for p in seq1] == [(p.text, p.answer) for p in seq2]


def test_generated_problems_are_single_digit_and_positive() -> None:
    gen = ProblemGenerator(random.Random(7))
    for _ in range(200):
        p = gen.next_problem()
        assert 1 <= p.a <= 9
        assert 1 <= p.b <= 9
        assert p.op in (Operator.ADD, Operator.SUB)
        assert p.answer > 0
        expected = p.a + p.b if p.op is Operator.ADD else p.a - p.b
        assert p.answer == expected


def test_generated_answer_avoids_used_set() -> None:
    gen = ProblemGenerator(random.Random(99))
    used = {1, 2, 3, 4, 5, 6, 7, 8, 9, 10}
    for _ in range(50):
        assert gen.next_problem(used_answers=used).answer not in used


def test_exhausted_generation_falls_back_to_smallest_free_answer() -> None:
    # 9 + 9 = 18 is the largest reachable answer, so every draw collides.
    used = set(range(1, 19))
    gen = ProblemGenerator(random.Random(1), max_attempts=100)

    p = gen.next_problem(used_answers=used)

    assert p.answer == 19
    assert (p.a, p.op, p.b) == (19, Operator.ADD, 0)
    assert p.text == "19 + 0"


def test_fallback_fills_first_gap() -> None:
    assert fallback_problem({1, 2, 4}).answer == 3
    assert fallback_problem(set()).answer == 1


def test_single_attempt_still_terminates_with_unique_answer() -> None:
    gen = ProblemGenerator(random.Random(5), max_attempts=1)
    used: set[int] = set()
    for _ in range(30):
        p = gen.next_problem(used_answers=used)
        assert p.answer > 0
        assert p.answer not in used
        used.add(p.answer)


def test_invalid_generator_arguments_raise() -> None:
    with pytest.raises(ValueError):
        ProblemGenerator(random.Random(0), operand_min=0)
    with pytest.raises(ValueError):
        ProblemGenerator(random.Random(0), operand_min=5, operand_max=4)
    with pytest.raises(ValueError):
        ProblemGenerator(random.Random(0), max_attempts=0)
