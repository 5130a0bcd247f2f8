"""Shared value types for the math grid core.

Everything here is immutable plain data. The board, the run state and the
tick scheduler exchange these values; none of them depend on pygame.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

GRID_SIZE = 3

_INT_RE = re.compile(r"[+-]?[0-9]+")


class Operator(StrEnum):
    ADD = "+"
    SUB = "-"


class MoveOutcome(StrEnum):
    ACCEPTED = "accepted"
    INVALID_INPUT = "invalid_input"
    NO_MATCH = "no_match"
    NOT_RUNNING = "not_running"


@dataclass(frozen=True, slots=True, order=True)
class GridPos:
    row: int
    col: int

    def in_bounds(self, size: int = GRID_SIZE) -> bool:
        return 0 <= self.row < size and 0 <= self.col < size

    def neighbors(self, size: int = GRID_SIZE) -> list[GridPos]:
        """Orthogonal neighbours in up, down, left, right order (in bounds only)."""

        candidates = (
            GridPos(self.row - 1, self.col),
            GridPos(self.row + 1, self.col),
            GridPos(self.row, self.col - 1),
            GridPos(self.row, self.col + 1),
        )
        return [p for p in candidates if p.in_bounds(size)]

    def distance(self, other: GridPos) -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)


def center(size: int = GRID_SIZE) -> GridPos:
    return GridPos(size // 2, size // 2)


def all_positions(size: int = GRID_SIZE) -> list[GridPos]:
    return [GridPos(r, c) for r in range(size) for c in range(size)]


@dataclass(frozen=True, slots=True)
class Problem:
    a: int
    b: int
    op: Operator
    answer: int

    @property
    def text(self) -> str:
        return f"{self.a} {self.op.value} {self.b}"

    @classmethod
    def of(cls, a: int, op: Operator | str, b: int) -> Problem:
        op = Operator(op)
        answer = a + b if op is Operator.ADD else a - b
        return cls(a=a, b=b, op=op, answer=answer)


@dataclass(frozen=True, slots=True)
class MoveResult:
    outcome: MoveOutcome
    new_position: GridPos | None = None
    previous_position: GridPos | None = None
    value: int | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome is MoveOutcome.ACCEPTED


@dataclass(frozen=True, slots=True)
class BoardSnapshot:
    """Immutable copy of the grid; ``None`` marks the player's cell."""

    cells: tuple[tuple[Problem | None, ...], ...]
    player: GridPos

    @property
    def size(self) -> int:
        return len(self.cells)

    def problem_at(self, pos: GridPos) -> Problem | None:
        return self.cells[pos.row][pos.col]

    def answers(self) -> list[int]:
        return [p.answer for row in self.cells for p in row if p is not None]

    def occupied(self) -> list[GridPos]:
        return [pos for pos in all_positions(self.size) if self.problem_at(pos) is None]


def parse_answer(raw: object) -> int | None:
    """Return the integer in ``raw`` or None when it is not a plain integer.

    Accepts ints and strings of decimal digits (optional sign, surrounding
    whitespace). Everything else, including bools and floats, is rejected.
    """

    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if not isinstance(raw, str):
        return None
    s = raw.strip()
    if not _INT_RE.fullmatch(s):
        return None
    try:
        return int(s)
    except ValueError:
        return None
