"""Tests for the Board module."""

import pytest

from candy_snake.board import Board
from candy_snake.snake import Point


class TestBoardInit:
    def test_default_dimensions(self):
        board = Board()
        assert board.width == 32
        assert board.height == 32
        assert board.capacity == 1024

    def test_minimum_size_enforced(self):
        with pytest.raises(ValueError, match="at least 1"):
            Board(width=0, height=4)


class TestBoardGeometry:
    def test_in_bounds(self):
        board = Board(width=5, height=4)
        assert board.in_bounds(Point(0, 0))
        assert board.in_bounds(Point(4, 3))
        assert not board.in_bounds(Point(-1, 0))
        assert not board.in_bounds(Point(5, 0))
        assert not board.in_bounds(Point(0, 4))

    def test_out_of_bounds_is_negation(self):
        board = Board(width=5, height=5)
        assert board.out_of_bounds(Point(0, -1))
        assert not board.out_of_bounds(Point(2, 2))

    def test_wrap(self):
        board = Board(width=5, height=4)
        assert board.wrap(Point(5, 2)) == Point(0, 2)
        assert board.wrap(Point(-1, 2)) == Point(4, 2)
        assert board.wrap(Point(2, -1)) == Point(2, 3)
        assert board.wrap(Point(2, 4)) == Point(2, 0)


class TestFirstFreeCell:
    def test_empty_board_returns_origin(self):
        assert Board(width=4, height=4).first_free_cell(set()) == Point(0, 0)

    def test_scans_row_major(self):
        board = Board(width=3, height=3)
        occupied = {Point(0, 0), Point(1, 0), Point(2, 0), Point(0, 1)}
        assert board.first_free_cell(occupied) == Point(1, 1)

    def test_full_board_returns_none(self):
        board = Board(width=2, height=2)
        occupied = {Point(x, y) for x in range(2) for y in range(2)}
        assert board.first_free_cell(occupied) is None

    def test_off_board_points_ignored(self):
        board = Board(width=2, height=1)
        assert board.first_free_cell({Point(-1, 0), Point(0, 0)}) == Point(1, 0)

    def test_occupancy_mask_shape(self):
        mask = Board(width=5, height=3).occupancy({Point(4, 2)})
        assert mask.shape == (3, 5)
        assert mask[2, 4]
        assert mask.sum() == 1
