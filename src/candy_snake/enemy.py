"""Enemy snakes: placement and the greedy steering heuristic."""

from __future__ import annotations

import logging
import math
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from typing import NamedTuple

from candy_snake.board import Board
from candy_snake.food import nearest_food_distance
from candy_snake.rng import random_empty_cell, rng_for
from candy_snake.snake import Direction, Point, build_body, move_point

logger = logging.getLogger(__name__)

_PLACEMENT_DIRECTIONS: tuple[Direction, ...] = (
    Direction.UP,
    Direction.RIGHT,
    Direction.DOWN,
    Direction.LEFT,
)


@dataclass(frozen=True)
class EnemySnake:
    """An AI-controlled snake occupying a fixed slot.

    ``id`` and ``hue`` belong to the slot and survive respawns there. A slot
    whose respawn failed is kept with ``alive=False`` and an empty body.
    """

    id: str
    body: tuple[Point, ...]
    direction: Direction
    alive: bool = True
    hue: int = 0

    @property
    def head(self) -> Point:
        return self.body[0]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "body": [p.to_dict() for p in self.body],
            "direction": self.direction.value,
            "alive": self.alive,
            "hue": self.hue,
        }


class EnemyTemplate(NamedTuple):
    head: Point
    direction: Direction
    hue: int


def enemy_id(index: int) -> str:
    return f"enemy-{index + 1}"


def dead_enemy(index: int, hue: int, direction: Direction = Direction.LEFT) -> EnemySnake:
    """Placeholder for a slot that could not be (re)populated."""
    return EnemySnake(enemy_id(index), (), direction, alive=False, hue=hue)


def enemy_templates(board: Board) -> tuple[EnemyTemplate, ...]:
    """Canonical spawn spots, one per slot, near three board corners."""
    w, h = board.width, board.height
    return (
        EnemyTemplate(Point(w - 6, 5), Direction.LEFT, 210),
        EnemyTemplate(Point(5, h - 6), Direction.RIGHT, 290),
        EnemyTemplate(Point(w - 6, h - 6), Direction.UP, 170),
    )


def fallback_hue(index: int) -> int:
    return (200 + index * 70) % 360


def live_enemy_cells(enemies: Iterable[EnemySnake]) -> set[Point]:
    """All cells covered by live enemy bodies."""
    cells: set[Point] = set()
    for enemy in enemies:
        if enemy.alive:
            cells.update(enemy.body)
    return cells


def can_place(body: Iterable[Point], occupied: Collection[Point], board: Board) -> bool:
    return all(board.in_bounds(p) and p not in occupied for p in body)


def spawn_enemy(
    index: int,
    occupied: Collection[Point],
    board: Board,
    length: int = 4,
    seed: int | None = None,
    tries: int = 40,
) -> EnemySnake | None:
    """Place an enemy for slot *index*.

    Tries the slot's template first, then up to *tries* random heads and
    directions. Returns ``None`` when nothing fits.
    """
    templates = enemy_templates(board)
    template = templates[index % len(templates)]
    body = build_body(template.head, template.direction, length)
    if can_place(body, occupied, board):
        return EnemySnake(enemy_id(index), body, template.direction, True, template.hue)

    rng = rng_for(seed + index if seed is not None else None)
    for _ in range(tries):
        head = random_empty_cell(board, occupied, rng)
        if head is None:
            break
        direction = _PLACEMENT_DIRECTIONS[
            math.floor(rng() * len(_PLACEMENT_DIRECTIONS))
        ]
        body = build_body(head, direction, length)
        if can_place(body, occupied, board):
            return EnemySnake(enemy_id(index), body, direction, True, fallback_hue(index))

    logger.warning("Could not place enemy in slot %d.", index)
    return None


def spawn_enemies(
    indices: Iterable[int],
    occupied: Iterable[Point],
    board: Board,
    length: int = 4,
    seed: int | None = None,
    tries: int = 40,
) -> dict[int, EnemySnake | None]:
    """Place enemies for each slot in *indices*, in order.

    Each placed body is reserved before the next slot is tried.
    """
    taken = set(occupied)
    placed: dict[int, EnemySnake | None] = {}
    for index in indices:
        enemy = spawn_enemy(index, taken, board, length, seed, tries)
        if enemy is not None:
            taken.update(enemy.body)
        placed[index] = enemy
    return placed


def is_move_blocked(
    enemy: EnemySnake,
    next_head: Point,
    foods: Sequence[Point],
    player_cells: Collection[Point],
    other_enemy_cells: Collection[Point],
    board: Board,
) -> bool:
    """Whether moving the enemy's head to *next_head* would be fatal.

    The enemy's own tail vacates unless the move eats food.
    """
    if board.out_of_bounds(next_head):
        return True
    if next_head in player_cells or next_head in other_enemy_cells:
        return True
    own_body = enemy.body if next_head in foods else enemy.body[:-1]
    return next_head in own_body


def choose_enemy_direction(
    enemy: EnemySnake,
    foods: Sequence[Point],
    player_cells: Collection[Point],
    other_enemy_cells: Collection[Point],
    board: Board,
) -> Direction:
    """Greedy one-step steering toward the nearest food.

    Candidates are tried straight, left, right, then reverse; the first
    unblocked candidate with the smallest distance wins. When every
    candidate is blocked the current heading is kept.
    """
    current = enemy.direction
    best_direction = current
    best_distance = math.inf

    for direction in (current, current.left, current.right, current.opposite):
        next_head = move_point(enemy.head, direction)
        if is_move_blocked(
            enemy, next_head, foods, player_cells, other_enemy_cells, board,
        ):
            continue
        distance = nearest_food_distance(next_head, foods)
        if distance < best_distance:
            best_distance = distance
            best_direction = direction

    return best_direction
