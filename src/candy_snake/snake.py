"""Points, directions and snake body construction."""

from __future__ import annotations

import enum
from typing import NamedTuple


class Point(NamedTuple):
    """Board-relative integer cell coordinate."""

    x: int
    y: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


class Direction(str, enum.Enum):
    """Cardinal movement directions."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def vector(self) -> tuple[int, int]:
        """Return the ``(dx, dy)`` step for this direction."""
        return _VECTORS[self]

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    @property
    def left(self) -> Direction:
        return _TURN_LEFT[self]

    @property
    def right(self) -> Direction:
        return _TURN_RIGHT[self]


_VECTORS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

# Pairs that would cause an instant 180° reversal.
_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_TURN_LEFT: dict[Direction, Direction] = {
    Direction.UP: Direction.LEFT,
    Direction.LEFT: Direction.DOWN,
    Direction.DOWN: Direction.RIGHT,
    Direction.RIGHT: Direction.UP,
}

_TURN_RIGHT: dict[Direction, Direction] = {
    Direction.UP: Direction.RIGHT,
    Direction.RIGHT: Direction.DOWN,
    Direction.DOWN: Direction.LEFT,
    Direction.LEFT: Direction.UP,
}


def move_point(point: Point, direction: Direction) -> Point:
    """Return the neighbouring cell one step in *direction*."""
    dx, dy = direction.vector
    return Point(point.x + dx, point.y + dy)


def build_body(head: Point, direction: Direction, length: int) -> tuple[Point, ...]:
    """Lay out a body of *length* cells trailing behind *head*.

    The head is ``body[0]``; the remaining segments extend opposite to
    *direction*.
    """
    if length < 1:
        raise ValueError("Snake length must be at least 1.")
    reverse = direction.opposite
    body = [head]
    for _ in range(1, length):
        body.append(move_point(body[-1], reverse))
    return tuple(body)


def manhattan(a: Point, b: Point) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)
