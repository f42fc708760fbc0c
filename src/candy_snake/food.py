"""Food placement logic."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from candy_snake.board import Board
from candy_snake.rng import random_empty_cell, rng_for
from candy_snake.snake import Point, manhattan

logger = logging.getLogger(__name__)


def spawn_one_food(
    board: Board, occupied: set[Point], seed: int | None = None,
) -> Point | None:
    """Pick an empty cell for a single food item."""
    return random_empty_cell(board, occupied, rng_for(seed))


def fill_foods(
    board: Board,
    existing: Iterable[Point],
    desired_count: int,
    occupied: Iterable[Point],
    seed: int | None = None,
    fallback: Point = Point(0, 0),
) -> tuple[Point, ...]:
    """Top the food list up to *desired_count*.

    Existing foods that do not collide with *occupied* (or each other) are
    kept first. When the board cannot host a single food, one is forced
    onto *fallback* even if that cell is taken.
    """
    taken = set(occupied)
    foods: list[Point] = []

    for food in existing:
        if len(foods) >= desired_count:
            break
        if food not in taken:
            foods.append(food)
            taken.add(food)

    for i in range(len(foods), desired_count):
        generated = spawn_one_food(
            board, taken, seed + i if seed is not None else None,
        )
        if generated is None:
            logger.warning(
                "Board saturated: placed %d of %d foods.", len(foods), desired_count,
            )
            break
        foods.append(generated)
        taken.add(generated)

    if not foods:
        logger.warning("No room for food; forcing one onto %s.", tuple(fallback))
        foods.append(fallback)
    return tuple(foods)


def refill_food_at(
    board: Board,
    foods: Sequence[Point],
    index: int,
    occupied: Iterable[Point],
    seed: int | None = None,
) -> tuple[Point, ...]:
    """Replace the food at *index* with one on a fresh empty cell.

    The eaten cell stays in place if the board has no room left.
    """
    taken = set(occupied)
    taken.update(food for i, food in enumerate(foods) if i != index)
    replacement = spawn_one_food(board, taken, seed)
    next_foods = list(foods)
    if replacement is not None:
        next_foods[index] = replacement
    return tuple(next_foods)


def nearest_food_distance(point: Point, foods: Iterable[Point]) -> float:
    """Manhattan distance to the closest food, ``inf`` when there is none."""
    return min((manhattan(point, food) for food in foods), default=float("inf"))
