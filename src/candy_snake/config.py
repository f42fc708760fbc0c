"""Tunable game constants."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType

from candy_snake.board import Board
from candy_snake.effects import (
    POWER_UP_DURATION_MS,
    POWER_UP_WEIGHTS,
    SHORTEN_BY,
    PowerUpType,
)
from candy_snake.snake import Point

logger = logging.getLogger(__name__)

# Enemy templates sit 6 cells in from the far edges and 5 from the near ones.
_MIN_BOARD_SIZE = 10


@dataclass(frozen=True)
class GameConfig:
    """Full game configuration.

    Supports JSON serialization so a tuned ruleset can be shared. The
    power-up tables are stored as read-only mappings, so a config is
    hashable like the rest of the game state.
    """

    # Board
    board_width: int = 32
    board_height: int = 32

    # Snakes
    initial_snake_length: int = 4
    enemy_initial_length: int = 4

    # Entity counts
    min_food_count: int = 1
    max_food_count: int = 12
    default_food_count: int = 5
    min_enemy_count: int = 1
    max_enemy_count: int = 3
    default_enemy_count: int = 1

    # Speed
    initial_tick_ms: int = 150
    score_per_speed_step: int = 5
    speed_step_ms: int = 5
    min_base_tick_ms: int = 75
    min_tick_ms: int = 40
    speed_up_multiplier: float = 0.75
    slow_down_multiplier: float = 1.35

    # Power-ups
    power_up_spawn_chance: float = 0.08
    power_up_ttl_ms: int = 8_000
    power_up_weights: Mapping[PowerUpType, int] = field(
        default_factory=lambda: dict(POWER_UP_WEIGHTS),
    )
    power_up_duration_ms: Mapping[PowerUpType, int] = field(
        default_factory=lambda: dict(POWER_UP_DURATION_MS),
    )
    shorten_by: int = SHORTEN_BY
    min_snake_length: int = 3

    # Placement
    enemy_placement_tries: int = 40
    food_fallback_x: int = 0
    food_fallback_y: int = 0

    def __post_init__(self) -> None:
        for name in ("power_up_weights", "power_up_duration_ms"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        if self.board_width < _MIN_BOARD_SIZE or self.board_height < _MIN_BOARD_SIZE:
            raise ValueError(
                f"board_width and board_height must each be at least {_MIN_BOARD_SIZE}."
            )
        if self.initial_snake_length < self.min_snake_length:
            raise ValueError("initial_snake_length must be at least min_snake_length.")
        if self.initial_snake_length > self.board_width // 2 + 1:
            raise ValueError("initial_snake_length does not fit the board.")
        if not 1 <= self.enemy_initial_length <= 5:
            raise ValueError("enemy_initial_length must be between 1 and 5.")
        if not 1 <= self.min_food_count <= self.default_food_count <= self.max_food_count:
            raise ValueError(
                "food counts must satisfy 1 <= min <= default <= max."
            )
        if not 1 <= self.min_enemy_count <= self.default_enemy_count <= self.max_enemy_count:
            raise ValueError(
                "enemy counts must satisfy 1 <= min <= default <= max."
            )
        if self.min_tick_ms < 1 or self.min_base_tick_ms < self.min_tick_ms:
            raise ValueError("min_tick_ms must be >= 1 and <= min_base_tick_ms.")
        if self.initial_tick_ms < self.min_base_tick_ms:
            raise ValueError("initial_tick_ms must be >= min_base_tick_ms.")
        if self.score_per_speed_step < 1:
            raise ValueError("score_per_speed_step must be at least 1.")
        if not 0.0 <= self.power_up_spawn_chance <= 1.0:
            raise ValueError("power_up_spawn_chance must be within [0, 1].")
        if not self.power_up_weights or any(
            w < 0 for w in self.power_up_weights.values()
        ):
            raise ValueError("power_up_weights must be non-empty and non-negative.")
        if self.enemy_placement_tries < 1:
            raise ValueError("enemy_placement_tries must be at least 1.")
        if not self.board.in_bounds(self.food_fallback):
            raise ValueError("food fallback cell must lie on the board.")

    def __hash__(self) -> int:
        return hash(tuple(
            frozenset(value.items()) if isinstance(value, Mapping) else value
            for value in (getattr(self, f.name) for f in fields(self))
        ))

    @property
    def board(self) -> Board:
        return Board(self.board_width, self.board_height)

    @property
    def food_fallback(self) -> Point:
        return Point(self.food_fallback_x, self.food_fallback_y)

    def clamp_food_count(self, count: int) -> int:
        return max(self.min_food_count, min(self.max_food_count, count))

    def clamp_enemy_count(self, count: int) -> int:
        return max(self.min_enemy_count, min(self.max_enemy_count, count))

    def to_dict(self) -> dict:
        """Serialize to a plain dict (power-up keys become names)."""
        d = {f.name: getattr(self, f.name) for f in fields(self)}
        d["power_up_weights"] = {
            k.value: v for k, v in self.power_up_weights.items()
        }
        d["power_up_duration_ms"] = {
            k.value: v for k, v in self.power_up_duration_ms.items()
        }
        return d

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def from_dict(cls, raw: dict) -> GameConfig:
        data = dict(raw)
        for key in ("power_up_weights", "power_up_duration_ms"):
            if key in data:
                data[key] = {PowerUpType(k): v for k, v in data[key].items()}
        return cls(**data)

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file."""
        return cls.from_dict(json.loads(Path(path).read_text()))


DEFAULT_CONFIG = GameConfig()
