"""Deterministic board engine for the math grid puzzle.

The board is a 3x3 grid. The player stands on one cell; every other cell
carries an arithmetic problem, and no two problems on the board share an
answer. Typing the answer of an orthogonally adjacent problem moves the
player there, the vacated cell receives a fresh problem and the run state is
rewarded.

The engine never raises on user input: malformed values, wrong answers and
submissions after the run has stopped all come back as a rejected
``MoveResult`` without touching any state.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable

from .config import GameConfig
from .grid_core import (
    GRID_SIZE,
    BoardSnapshot,
    GridPos,
    MoveOutcome,
    MoveResult,
    Problem,
    all_positions,
    center,
    parse_answer,
)
from .problems import ProblemGenerator
from .run_state import RunState

logger = logging.getLogger(__name__)

MoveListener = Callable[[MoveResult], None]


class BoardEngine:
    def __init__(
        self,
        run_state: RunState,
        *,
        config: GameConfig | None = None,
        seed: int | None = None,
    ) -> None:
        self._run = run_state
        self._config = config if config is not None else GameConfig()
        self._size = GRID_SIZE
        self._rng = random.Random(seed)
        self._gen = self._make_generator()
        self._cells: dict[GridPos, Problem | None] = {}
        self._player = center(self._size)
        self._listeners: list[MoveListener] = []
        self.initialize(seed)

    @property
    def size(self) -> int:
        return self._size

    @property
    def player(self) -> GridPos:
        return self._player

    def initialize(self, seed: int | None = None) -> BoardSnapshot:
        """Place the player at the centre and deal a fresh, unique board.

        A seed makes the deal reproducible; without one the engine keeps
        drawing from its current random stream.
        """

        if seed is not None:
            self._rng = random.Random(seed)
            self._gen = self._make_generator()

        self._player = center(self._size)
        self._cells = {}
        used: set[int] = set()
        for pos in all_positions(self._size):
            if pos == self._player:
                self._cells[pos] = None
                continue
            problem = self._gen.next_problem(used_answers=used)
            self._cells[pos] = problem
            used.add(problem.answer)
        return self.snapshot()

    def problem_at(self, pos: GridPos) -> Problem | None:
        if not pos.in_bounds(self._size):
            raise ValueError(f"{pos} is outside the {self._size}x{self._size} grid")
        return self._cells[pos]

    def answers(self) -> set[int]:
        return {p.answer for p in self._cells.values() if p is not None}

    def neighbors(self) -> list[GridPos]:
        return self._player.neighbors(self._size)

    def snapshot(self) -> BoardSnapshot:
        rows = tuple(
            tuple(self._cells[GridPos(r, c)] for c in range(self._size)) for r in range(self._size)
        )
        return BoardSnapshot(cells=rows, player=self._player)

    def place_problem(self, pos: GridPos, problem: Problem) -> None:
        """Put ``problem`` on ``pos``.

        Another cell already holding the same answer is dealt a replacement,
        so the uniqueness invariant survives.
        """

        if not pos.in_bounds(self._size):
            raise ValueError(f"{pos} is outside the {self._size}x{self._size} grid")
        if pos == self._player:
            raise ValueError("cannot place a problem on the player's cell")
        if problem.answer <= 0:
            raise ValueError("problem answer must be positive")

        self._cells[pos] = problem
        for other, existing in self._cells.items():
            if other == pos or existing is None or existing.answer != problem.answer:
                continue
            self._cells[other] = self._gen.next_problem(used_answers=self._answers_excluding(other))

    def submit_answer(self, raw: object) -> MoveResult:
        if not self._run.is_running:
            return MoveResult(MoveOutcome.NOT_RUNNING)

        value = parse_answer(raw)
        if value is None:
            logger.debug("rejected malformed input %r", raw)
            return MoveResult(MoveOutcome.INVALID_INPUT)

        target = self._find_neighbor(value)
        if target is None:
            logger.debug("no adjacent problem answers %d", value)
            return MoveResult(MoveOutcome.NO_MATCH, value=value)

        previous = self._player
        self._cells[target] = None
        self._player = target
        self._cells[previous] = self._gen.next_problem(used_answers=self._answers_excluding(previous))

        self._run.increase_health(self._config.move_health_reward)
        self._run.increase_score(self._config.move_score_reward)

        result = MoveResult(
            MoveOutcome.ACCEPTED,
            new_position=target,
            previous_position=previous,
            value=value,
        )
        logger.debug("moved %s -> %s", previous, target)
        for listener in list(self._listeners):
            listener(result)
        return result

    def subscribe(self, listener: MoveListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _find_neighbor(self, value: int) -> GridPos | None:
        for pos in self.neighbors():
            problem = self._cells[pos]
            if problem is not None and problem.answer == value:
                return pos
        return None

    def _answers_excluding(self, pos: GridPos) -> set[int]:
        return {p.answer for other, p in self._cells.items() if other != pos and p is not None}

    def _make_generator(self) -> ProblemGenerator:
        return ProblemGenerator(
            self._rng,
            operand_min=self._config.operand_min,
            operand_max=self._config.operand_max,
            max_attempts=self._config.max_generation_attempts,
        )
