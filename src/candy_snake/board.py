"""Board geometry for the snake game."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from candy_snake.snake import Point


@dataclass(frozen=True)
class Board:
    """Fixed-size rectangular board.

    Coordinates are ``(x, y)`` with the origin in the top-left corner;
    occupancy scans run row-major (``y`` outer, ``x`` inner).
    """

    width: int = 32
    height: int = 32

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError("Board dimensions must be at least 1×1.")

    @property
    def capacity(self) -> int:
        return self.width * self.height

    def in_bounds(self, point: Point) -> bool:
        """Check whether a point lies on the board."""
        return 0 <= point.x < self.width and 0 <= point.y < self.height

    def out_of_bounds(self, point: Point) -> bool:
        return not self.in_bounds(point)

    def wrap(self, point: Point) -> Point:
        """Wrap a point around the board edges."""
        return Point(point.x % self.width, point.y % self.height)

    def occupancy(self, occupied: Iterable[Point]) -> np.ndarray:
        """Return a ``(height, width)`` boolean mask of occupied cells."""
        mask = np.zeros((self.height, self.width), dtype=bool)
        for point in occupied:
            if self.in_bounds(point):
                mask[point.y, point.x] = True
        return mask

    def first_free_cell(self, occupied: Iterable[Point]) -> Point | None:
        """Return the first unoccupied cell in row-major order, if any."""
        free = np.flatnonzero(~self.occupancy(occupied))
        if free.size == 0:
            return None
        y, x = divmod(int(free[0]), self.width)
        return Point(x, y)
