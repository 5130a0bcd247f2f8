"""Facade over the board, run state and tick scheduler for one game.

``MathGridGame`` is what the presentation layer talks to. It owns exactly one
``RunState``, ``BoardEngine`` and ``TickScheduler`` and serializes every
mutation behind a single lock, so a tick and a submitted answer are always
applied one after the other in the order they arrived.
"""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass

from .board import BoardEngine
from .clock import Clock
from .config import GameConfig
from .grid_core import BoardSnapshot, MoveResult
from .run_state import RunState
from .ticker import TickScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """View model for the UI (pure data)."""

    health: int
    score: int
    is_running: bool
    board: BoardSnapshot
    seed: int
    moves: int


class MathGridGame:
    def __init__(
        self,
        *,
        clock: Clock,
        seed: int | None = None,
        config: GameConfig | None = None,
    ) -> None:
        self._config = config if config is not None else GameConfig()
        self._clock = clock
        self._lock = threading.RLock()
        self._seed = _new_seed() if seed is None else int(seed)
        self._moves = 0

        self._run = RunState(start_health=self._config.start_health)
        self._board = BoardEngine(self._run, config=self._config, seed=self._seed)
        self._ticker = TickScheduler(
            self._run,
            clock=clock,
            interval_s=self._config.tick_interval_s,
            damage=self._config.tick_damage,
        )
        self._ticker.bind()

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def moves(self) -> int:
        return self._moves

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def board(self) -> BoardEngine:
        return self._board

    @property
    def run_state(self) -> RunState:
        return self._run

    @property
    def ticking(self) -> bool:
        return self._ticker.active

    def initialize(self, seed: int | None = None) -> BoardSnapshot:
        with self._lock:
            if seed is not None:
                self._seed = int(seed)
            self._moves = 0
            return self._board.initialize(self._seed)

    def submit_answer(self, raw: object) -> MoveResult:
        with self._lock:
            # Ticks that came due before this submission land first.
            self._ticker.update()
            result = self._board.submit_answer(raw)
            if result.accepted:
                self._moves += 1
            return result

    def get_health(self) -> int:
        with self._lock:
            return self._run.health

    def get_score(self) -> int:
        with self._lock:
            return self._run.score

    def is_running(self) -> bool:
        with self._lock:
            return self._run.is_running

    def reset(self, seed: int | None = None) -> BoardSnapshot:
        """Start a new run: default run state, fresh board, ticking re-armed."""

        with self._lock:
            self._ticker.stop()
            self._seed = _new_seed() if seed is None else int(seed)
            self._moves = 0
            self._run.reset()
            board = self._board.initialize(self._seed)
            self._ticker.start()
            logger.debug("run reset with seed %d", self._seed)
            return board

    def start_ticking(self) -> None:
        with self._lock:
            self._ticker.start()

    def stop_ticking(self) -> None:
        with self._lock:
            self._ticker.stop()

    def update(self) -> int:
        """Advance the tick scheduler to the current clock time."""

        with self._lock:
            return self._ticker.update()

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return GameSnapshot(
                health=self._run.health,
                score=self._run.score,
                is_running=self._run.is_running,
                board=self._board.snapshot(),
                seed=self._seed,
                moves=self._moves,
            )


def build_math_grid_game(
    *,
    clock: Clock,
    seed: int | None = None,
    config: GameConfig | None = None,
) -> MathGridGame:
    """Create a game and start its tick scheduler."""

    game = MathGridGame(clock=clock, seed=seed, config=config)
    game.start_ticking()
    return game


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)
