"""Candy Snake: a deterministic snake-versus-AI arcade simulation."""

from candy_snake.board import Board
from candy_snake.config import GameConfig
from candy_snake.effects import ActiveEffects, PowerUpInstance, PowerUpType
from candy_snake.engine import (
    GameState,
    create_initial_state,
    restart,
    set_enemy_count,
    set_food_count,
    step,
    toggle_pause,
    turn,
)
from candy_snake.enemy import EnemySnake
from candy_snake.rng import create_rng
from candy_snake.session import GameSession
from candy_snake.snake import Direction, Point

__all__ = [
    "ActiveEffects",
    "Board",
    "Direction",
    "EnemySnake",
    "GameConfig",
    "GameSession",
    "GameState",
    "Point",
    "PowerUpInstance",
    "PowerUpType",
    "create_initial_state",
    "create_rng",
    "restart",
    "set_enemy_count",
    "set_food_count",
    "step",
    "toggle_pause",
    "turn",
]
