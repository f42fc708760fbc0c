"""Injectable random sources and random placement helpers.

All randomness in the game flows through an :data:`Rng`: a zero-argument
callable returning a float in ``[0, 1)``. Seeded games use
:class:`LinearCongruentialRng` so replays are reproducible; unseeded games
draw from a NumPy generator backed by host entropy.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Collection, Mapping
from typing import TypeVar

import numpy as np

from candy_snake.board import Board
from candy_snake.snake import Point

logger = logging.getLogger(__name__)

Rng = Callable[[], float]

K = TypeVar("K")

_MODULUS = 2_147_483_647  # 2**31 - 1
_MULTIPLIER = 16_807
_EMPTY_CELL_TRIES = 200


class LinearCongruentialRng:
    """Park–Miller minimal standard generator.

    The full output sequence is determined by the integer seed.
    """

    def __init__(self, seed: int) -> None:
        value = int(seed) % _MODULUS
        if value <= 0:
            value += _MODULUS - 1
        self._value = value

    def __call__(self) -> float:
        self._value = (self._value * _MULTIPLIER) % _MODULUS
        return (self._value - 1) / (_MODULUS - 1)


def create_rng(seed: int) -> Rng:
    """Return a deterministic generator for *seed*."""
    return LinearCongruentialRng(seed)


def host_rng() -> Rng:
    """Return a non-deterministic generator seeded from host entropy."""
    generator = np.random.default_rng()
    return lambda: float(generator.random())


def rng_for(seed: int | None) -> Rng:
    """Seeded generator when *seed* is given, host entropy otherwise."""
    return create_rng(seed) if seed is not None else host_rng()


def random_int(low: int, high: int, rng: Rng) -> int:
    """Uniform integer in the inclusive range ``[low, high]``."""
    return math.floor(rng() * (high - low + 1)) + low


def chance(probability: float, rng: Rng) -> bool:
    return rng() < probability


def pick_weighted(weights: Mapping[K, float], rng: Rng) -> K:
    """Pick a key with probability proportional to its weight.

    The roll is uniform over the cumulative weight sum; the first key whose
    cumulative weight reaches the roll wins, and the last key absorbs any
    floating-point shortfall.
    """
    entries = list(weights.items())
    if not entries:
        raise ValueError("weights must not be empty.")
    total = sum(weight for _, weight in entries)
    roll = rng() * total
    cursor = 0.0
    for key, weight in entries:
        cursor += weight
        if roll <= cursor:
            return key
    return entries[-1][0]


def random_empty_cell(
    board: Board,
    occupied: Collection[Point],
    rng: Rng,
    tries: int = _EMPTY_CELL_TRIES,
) -> Point | None:
    """Find an unoccupied cell.

    Samples up to *tries* uniform candidates, then falls back to a
    row-major scan. Returns ``None`` only when the board is full.
    """
    if len(occupied) >= board.capacity:
        return None

    for _ in range(tries):
        candidate = Point(
            random_int(0, board.width - 1, rng),
            random_int(0, board.height - 1, rng),
        )
        if candidate not in occupied:
            return candidate

    cell = board.first_free_cell(occupied)
    if cell is None:
        logger.warning("No empty cells left on %dx%d board.", board.width, board.height)
    return cell
