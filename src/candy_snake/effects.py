"""Timed effects and power-up rules."""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace

from candy_snake.rng import Rng, pick_weighted
from candy_snake.snake import Point

logger = logging.getLogger(__name__)


class PowerUpType(str, enum.Enum):
    """Kinds of power-up that can appear on the board."""

    SPEED_UP = "SPEED_UP"
    SLOW_DOWN = "SLOW_DOWN"
    GHOST_WALL = "GHOST_WALL"
    DOUBLE_SCORE = "DOUBLE_SCORE"
    SHORTEN = "SHORTEN"
    SHIELD = "SHIELD"


POWER_UP_WEIGHTS: dict[PowerUpType, int] = {
    PowerUpType.SPEED_UP: 20,
    PowerUpType.SLOW_DOWN: 20,
    PowerUpType.GHOST_WALL: 15,
    PowerUpType.DOUBLE_SCORE: 20,
    PowerUpType.SHORTEN: 15,
    PowerUpType.SHIELD: 10,
}

POWER_UP_DURATION_MS: dict[PowerUpType, int] = {
    PowerUpType.SPEED_UP: 6_000,
    PowerUpType.SLOW_DOWN: 6_000,
    PowerUpType.GHOST_WALL: 8_000,
    PowerUpType.DOUBLE_SCORE: 10_000,
}

SHORTEN_BY = 3

# Timed effect -> ActiveEffects attribute holding its expiry.
_EXPIRY_FIELDS: dict[PowerUpType, str] = {
    PowerUpType.SPEED_UP: "speed_up_until",
    PowerUpType.SLOW_DOWN: "slow_down_until",
    PowerUpType.GHOST_WALL: "ghost_wall_until",
    PowerUpType.DOUBLE_SCORE: "double_score_until",
}


@dataclass(frozen=True)
class PowerUpInstance:
    """A collectable power-up lying on the board until ``expires_at``."""

    type: PowerUpType
    position: Point
    expires_at: float

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "position": self.position.to_dict(),
            "expires_at": self.expires_at,
        }


@dataclass(frozen=True)
class ActiveEffects:
    """Absolute expiry timestamps for timed effects plus the shield flag.

    ``None`` means the effect is inactive.
    """

    speed_up_until: float | None = None
    slow_down_until: float | None = None
    ghost_wall_until: float | None = None
    double_score_until: float | None = None
    shield: bool = False

    def to_dict(self) -> dict:
        return {
            "speed_up_until": self.speed_up_until,
            "slow_down_until": self.slow_down_until,
            "ghost_wall_until": self.ghost_wall_until,
            "double_score_until": self.double_score_until,
            "shield": self.shield,
        }


def choose_power_up_type(
    rng: Rng, weights: Mapping[PowerUpType, float] = POWER_UP_WEIGHTS,
) -> PowerUpType:
    return pick_weighted(weights, rng)


def is_effect_active(until: float | None, now: float) -> bool:
    """An effect is active while its expiry lies strictly in the future."""
    return until is not None and until > now


def effect_remaining_ms(until: float | None, now: float) -> float:
    if not until:
        return 0
    return max(0, until - now)


def cleanup_expired_effects(effects: ActiveEffects, now: float) -> ActiveEffects:
    """Drop expiry timestamps that are no longer active.

    The shield is consumed explicitly and is never touched here.
    """
    expired = {
        name: None
        for name in _EXPIRY_FIELDS.values()
        if not is_effect_active(getattr(effects, name), now)
    }
    if not any(getattr(effects, name) is not None for name in expired):
        return effects
    return replace(effects, **expired)


def apply_power_up(
    effects: ActiveEffects,
    power_up_type: PowerUpType,
    now: float,
    durations: Mapping[PowerUpType, float] = POWER_UP_DURATION_MS,
    shorten_by: int = SHORTEN_BY,
) -> tuple[ActiveEffects, int]:
    """Apply a collected power-up.

    Returns the updated effects and the number of segments the caller
    should remove from the snake (non-zero only for SHORTEN).
    """
    logger.debug("Applying power-up %s at %s.", power_up_type.value, now)
    if power_up_type == PowerUpType.SHORTEN:
        return effects, shorten_by
    if power_up_type == PowerUpType.SHIELD:
        return replace(effects, shield=True), 0

    field_name = _EXPIRY_FIELDS[power_up_type]
    until = now + durations.get(power_up_type, 0)
    return replace(effects, **{field_name: until}), 0


def active_timers(effects: ActiveEffects, now: float) -> dict:
    """Remaining milliseconds per timed effect, for HUD display."""
    return {
        "speed_up": effect_remaining_ms(effects.speed_up_until, now),
        "slow_down": effect_remaining_ms(effects.slow_down_until, now),
        "ghost_wall": effect_remaining_ms(effects.ghost_wall_until, now),
        "double_score": effect_remaining_ms(effects.double_score_until, now),
        "shield": effects.shield,
    }
