from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_START_HEALTH = 100


@dataclass(frozen=True, slots=True)
class RunSnapshot:
    health: int
    score: int
    is_running: bool


RunListener = Callable[[RunSnapshot], None]


class RunState:
    """Health, score and the running flag for one run.

    Two states: running and stopped. Health hitting zero stops the run and
    nothing but ``reset()`` (or an explicit ``set_running(True)`` with health
    left) starts it again.
    """

    def __init__(self, *, start_health: int = DEFAULT_START_HEALTH) -> None:
        if start_health <= 0:
            raise ValueError("start_health must be > 0")
        self._start_health = int(start_health)
        self._health = self._start_health
        self._score = 0
        self._running = True
        self._listeners: list[RunListener] = []

    @property
    def health(self) -> int:
        return self._health

    @property
    def score(self) -> int:
        return self._score

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def start_health(self) -> int:
        return self._start_health

    def snapshot(self) -> RunSnapshot:
        return RunSnapshot(health=self._health, score=self._score, is_running=self._running)

    def decrease_health(self, amount: int) -> None:
        _require_non_negative(amount)
        self._health = max(0, self._health - int(amount))
        if self._health == 0:
            if self._running:
                logger.debug("health exhausted; run stopped at score %d", self._score)
            self._running = False
        self._notify()

    def increase_health(self, amount: int) -> None:
        _require_non_negative(amount)
        self._health += int(amount)
        self._notify()

    def increase_score(self, amount: int) -> None:
        _require_non_negative(amount)
        self._score += int(amount)
        self._notify()

    def set_running(self, running: bool) -> None:
        if running and self._health == 0:
            logger.debug("ignoring set_running(True) with zero health")
            return
        self._running = bool(running)
        self._notify()

    def reset(self) -> None:
        self._health = self._start_health
        self._score = 0
        self._running = True
        self._notify()

    def subscribe(self, listener: RunListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)


def _require_non_negative(amount: int) -> None:
    if amount < 0:
        raise ValueError("amount must be non-negative")
