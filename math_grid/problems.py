from __future__ import annotations

import logging
import random
from collections.abc import Collection

from .grid_core import Operator, Problem

logger = logging.getLogger(__name__)


class ProblemGenerator:
    """Draws single-digit +/- problems whose answers avoid a given set.

    Retries are bounded. When every attempt collides (or comes out
    non-positive) the generator synthesizes ``n + 0`` for the smallest
    positive ``n`` not yet used, so it always terminates with a fresh answer.
    """

    def __init__(
        self,
        rng: random.Random,
        *,
        operand_min: int = 1,
        operand_max: int = 9,
        max_attempts: int = 100,
    ) -> None:
        if operand_min < 1 or operand_max < operand_min:
            raise ValueError("operand range must satisfy 1 <= operand_min <= operand_max")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._rng = rng
        self._operand_min = int(operand_min)
        self._operand_max = int(operand_max)
        self._max_attempts = int(max_attempts)
        self._operators = [Operator.ADD, Operator.SUB]

    def next_problem(self, *, used_answers: Collection[int] = ()) -> Problem:
        for _ in range(self._max_attempts):
            a = self._rng.randint(self._operand_min, self._operand_max)
            b = self._rng.randint(self._operand_min, self._operand_max)
            op = self._rng.choice(self._operators)
            problem = Problem.of(a, op, b)
            if problem.answer > 0 and problem.answer not in used_answers:
                return problem

        fallback = fallback_problem(used_answers)
        logger.warning(
            "problem generation exhausted %d attempts; using %s",
            self._max_attempts,
            fallback.text,
        )
        return fallback


def fallback_problem(used_answers: Collection[int]) -> Problem:
    n = 1
    while n in used_answers:
        n += 1
    return Problem.of(n, Operator.ADD, 0)
