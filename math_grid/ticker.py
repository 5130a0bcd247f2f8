from __future__ import annotations

import logging
from collections.abc import Callable

from .clock import Clock
from .run_state import RunSnapshot, RunState

logger = logging.getLogger(__name__)


class TickScheduler:
    """Fixed-period health decay bound to the run state.

    There is never more than one outstanding registration: ``start()`` on an
    armed scheduler is a no-op. Time comes from the injected ``Clock`` and is
    polled via ``update()`` once per frame; tests may call ``tick()``
    directly instead.
    """

    def __init__(
        self,
        run_state: RunState,
        *,
        clock: Clock,
        interval_s: float = 1.0,
        damage: int = 1,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        if damage < 0:
            raise ValueError("damage must be >= 0")
        self._run = run_state
        self._clock = clock
        self._interval_s = float(interval_s)
        self._damage = int(damage)
        self._next_at: float | None = None
        self._was_running = run_state.is_running

    @property
    def active(self) -> bool:
        return self._next_at is not None

    @property
    def interval_s(self) -> float:
        return self._interval_s

    def start(self) -> None:
        if self._next_at is not None:
            return
        if not self._run.is_running:
            return
        self._next_at = self._clock.now() + self._interval_s
        logger.debug("tick scheduler armed")

    def stop(self) -> None:
        if self._next_at is not None:
            logger.debug("tick scheduler disarmed")
        self._next_at = None

    def update(self) -> int:
        """Fire every tick that has come due; returns how many fired."""

        fired = 0
        now = self._clock.now()
        while self._next_at is not None and now >= self._next_at:
            self._next_at += self._interval_s
            if not self.tick():
                break
            fired += 1
        return fired

    def tick(self) -> bool:
        if not self._run.is_running:
            self.stop()
            return False
        self._run.decrease_health(self._damage)
        if not self._run.is_running:
            self.stop()
        return True

    def bind(self) -> Callable[[], None]:
        """Follow run transitions: disarm on stop, re-arm on a fresh start."""

        self._was_running = self._run.is_running
        return self._run.subscribe(self._on_run_change)

    def _on_run_change(self, snap: RunSnapshot) -> None:
        if snap.is_running and not self._was_running:
            self._was_running = True
            self.start()
        elif not snap.is_running:
            self._was_running = False
            self.stop()
