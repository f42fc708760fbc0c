"""Tests for food placement."""

from candy_snake.board import Board
from candy_snake.food import (
    fill_foods,
    nearest_food_distance,
    refill_food_at,
    spawn_one_food,
)
from candy_snake.snake import Point

BOARD = Board(width=12, height=12)


class TestSpawnOneFood:
    def test_avoids_occupied(self):
        occupied = {Point(x, y) for x in range(12) for y in range(11)}
        food = spawn_one_food(BOARD, occupied, seed=4)
        assert food is not None
        assert food.y == 11

    def test_seeded_is_deterministic(self):
        assert spawn_one_food(BOARD, set(), seed=8) == spawn_one_food(BOARD, set(), seed=8)


class TestFillFoods:
    def test_fills_to_target(self):
        foods = fill_foods(BOARD, (), 5, set(), seed=1)
        assert len(foods) == 5
        assert len(set(foods)) == 5

    def test_keeps_existing_valid_foods_first(self):
        existing = (Point(1, 1), Point(2, 2), Point(3, 3))
        foods = fill_foods(BOARD, existing, 5, set(), seed=1)
        assert foods[:3] == existing
        assert len(foods) == 5

    def test_truncates_to_target(self):
        existing = (Point(1, 1), Point(2, 2), Point(3, 3))
        assert fill_foods(BOARD, existing, 2, set(), seed=1) == existing[:2]

    def test_drops_existing_food_under_occupied_cells(self):
        existing = (Point(1, 1), Point(2, 2))
        foods = fill_foods(BOARD, existing, 2, {Point(1, 1)}, seed=1)
        assert Point(1, 1) not in foods
        assert Point(2, 2) in foods
        assert len(foods) == 2

    def test_drops_duplicate_existing_foods(self):
        existing = (Point(1, 1), Point(1, 1))
        foods = fill_foods(BOARD, existing, 2, set(), seed=1)
        assert len(set(foods)) == 2

    def test_never_overlaps_occupied(self):
        occupied = {Point(x, 0) for x in range(12)}
        foods = fill_foods(BOARD, (), 10, occupied, seed=3)
        assert not set(foods) & occupied

    def test_saturated_board_degrades(self):
        board = Board(width=2, height=2)
        occupied = {Point(0, 0), Point(1, 0), Point(0, 1)}
        assert fill_foods(board, (), 3, occupied, seed=1) == (Point(1, 1),)

    def test_full_board_forces_fallback(self):
        board = Board(width=2, height=2)
        occupied = {Point(x, y) for x in range(2) for y in range(2)}
        assert fill_foods(board, (), 3, occupied, seed=1) == (Point(0, 0),)


class TestRefillFoodAt:
    def test_replaces_only_the_eaten_food(self):
        foods = (Point(1, 1), Point(2, 2), Point(3, 3))
        refilled = refill_food_at(BOARD, foods, 1, {Point(2, 2)}, seed=5)
        assert refilled[0] == Point(1, 1)
        assert refilled[2] == Point(3, 3)
        assert refilled[1] not in {Point(1, 1), Point(2, 2), Point(3, 3)}

    def test_keeps_eaten_cell_when_board_full(self):
        board = Board(width=2, height=1)
        foods = (Point(0, 0),)
        refilled = refill_food_at(board, foods, 0, {Point(0, 0), Point(1, 0)}, seed=5)
        assert refilled == foods


class TestNearestFoodDistance:
    def test_nearest(self):
        foods = [Point(10, 10), Point(2, 3)]
        assert nearest_food_distance(Point(0, 0), foods) == 5

    def test_no_food_is_infinite(self):
        assert nearest_food_distance(Point(0, 0), []) == float("inf")
