from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields

ENV_PREFIX = "MATH_GRID_"
SEED_ENV = "MATH_GRID_SEED"


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Tunable constants for one run.

    Rewards and decay are plain parameters; nothing derives them from problem
    difficulty.
    """

    start_health: int = 100
    tick_interval_s: float = 1.0
    tick_damage: int = 1
    move_health_reward: int = 1
    move_score_reward: int = 1
    operand_min: int = 1
    operand_max: int = 9
    max_generation_attempts: int = 100

    def __post_init__(self) -> None:
        if self.start_health <= 0:
            raise ValueError("start_health must be > 0")
        if self.tick_interval_s <= 0:
            raise ValueError("tick_interval_s must be > 0")
        if self.tick_damage < 0:
            raise ValueError("tick_damage must be >= 0")
        if self.move_health_reward < 0:
            raise ValueError("move_health_reward must be >= 0")
        if self.move_score_reward < 0:
            raise ValueError("move_score_reward must be >= 0")
        if self.operand_min < 1 or self.operand_max < self.operand_min:
            raise ValueError("operand range must satisfy 1 <= operand_min <= operand_max")
        if self.max_generation_attempts < 1:
            raise ValueError("max_generation_attempts must be >= 1")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GameConfig:
        """Build a config, overriding defaults from ``MATH_GRID_*`` variables."""

        env = os.environ if environ is None else environ
        overrides: dict[str, int | float] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            cast = float if f.type in ("float", float) else int
            try:
                overrides[f.name] = cast(raw.strip())
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}{f.name.upper()} must be a number, got {raw!r}") from None
        return cls(**overrides)


def seed_from_env(environ: Mapping[str, str] | None = None) -> int | None:
    env = os.environ if environ is None else environ
    raw = env.get(SEED_ENV, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{SEED_ENV} must be an integer, got {raw!r}") from None
