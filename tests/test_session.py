"""Tests for the real-time session driver."""

from __future__ import annotations

from dataclasses import replace

import pytest

from candy_snake.effects import PowerUpInstance, PowerUpType
from candy_snake.engine import create_initial_state
from candy_snake.session import (
    ConsumptionEvent,
    ConsumptionKind,
    GameSession,
    detect_consumption,
)
from candy_snake.snake import Direction, Point, build_body
from candy_snake.stats import Stats, StatsStore


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def no_power_up():
    return 0.9


def _doomed_state(**changes):
    """A state whose next step runs the player into the right wall."""
    state = create_initial_state(seed=1)
    return replace(
        state,
        snake=build_body(Point(31, 20), Direction.RIGHT, 4),
        foods=(Point(2, 30),),
        **changes,
    )


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(tmp_path):
    return StatsStore(tmp_path / "stats.json")


class TestDetectConsumption:
    def test_no_event(self):
        state = create_initial_state(seed=0)
        assert detect_consumption(state, state) is None

    def test_food(self):
        prev = create_initial_state(seed=0)
        nxt = replace(prev, score=1)
        event = detect_consumption(prev, nxt)
        assert event == ConsumptionEvent(ConsumptionKind.FOOD, prev.head)

    def test_power_up_takes_precedence(self):
        prev = create_initial_state(seed=0)
        prev = replace(
            prev, power_up=PowerUpInstance(PowerUpType.SHIELD, prev.head, 5000),
        )
        nxt = replace(prev, score=1, power_up=None)
        assert detect_consumption(prev, nxt).kind == ConsumptionKind.POWER_UP

    def test_expired_power_up_is_not_a_pickup(self):
        prev = create_initial_state(seed=0)
        prev = replace(
            prev, power_up=PowerUpInstance(PowerUpType.SHIELD, Point(1, 1), 5000),
        )
        nxt = replace(prev, power_up=None)
        assert detect_consumption(prev, nxt) is None

    def test_event_to_dict(self):
        event = ConsumptionEvent(ConsumptionKind.FOOD, Point(3, 4))
        assert event.to_dict() == {"kind": "food", "position": {"x": 3, "y": 4}}


class TestSessionControls:
    def test_new_session_waits(self, clock):
        session = GameSession(seed=1, clock=clock)
        assert not session.started
        assert session.state.is_paused
        assert not session.running

    def test_first_turn_starts(self, clock):
        session = GameSession(seed=1, clock=clock)
        session.turn(Direction.UP)
        assert session.started
        assert session.running
        assert session.state.queued_direction == Direction.UP

    def test_reverse_first_turn_still_starts(self, clock):
        session = GameSession(seed=1, clock=clock)
        session.turn(Direction.LEFT)
        assert session.running
        assert session.state.queued_direction is None

    def test_pause_requires_start(self, clock):
        session = GameSession(seed=1, clock=clock)
        session.toggle_pause()
        assert session.state.is_paused
        assert not session.started

    def test_start_and_pause(self, clock):
        session = GameSession(seed=1, clock=clock)
        session.start()
        assert session.running
        session.toggle_pause()
        assert not session.running
        session.toggle_pause()
        assert session.running

    def test_counts_forwarded(self, clock):
        session = GameSession(seed=1, clock=clock)
        session.set_food_count(9)
        session.set_enemy_count(2)
        assert len(session.state.foods) == 9
        assert len(session.state.enemies) == 2


class TestSessionTick:
    def test_paused_tick_is_noop(self, clock):
        session = GameSession(seed=1, clock=clock, rng=no_power_up)
        before = session.state
        assert session.tick() is before
        assert session.last_event is None

    def test_tick_moves_and_reports_food(self, clock):
        state = replace(create_initial_state(seed=1), foods=(Point(17, 16),))
        session = GameSession(state, clock=clock, rng=no_power_up)
        session.start()
        session.tick()
        assert session.state.head == Point(17, 16)
        assert session.last_event == ConsumptionEvent(ConsumptionKind.FOOD, Point(17, 16))

        clock.advance(session.state.tick_ms)
        session.tick()
        assert session.last_event is None

    def test_seeded_sessions_replay(self):
        def play():
            clock = FakeClock()
            session = GameSession(seed=7, clock=clock)
            session.start()
            for _ in range(60):
                clock.advance(session.state.tick_ms)
                session.tick()
            return session.state

        assert play() == play()


class TestSessionStats:
    def test_loads_stored_stats(self, clock, store):
        store.save(Stats(best_score=30, games_played=5))
        session = GameSession(seed=1, clock=clock, stats_store=store)
        assert session.state.best_score == 30
        assert session.state.games_played == 5

    def test_game_over_recorded_once(self, clock, store):
        session = GameSession(
            _doomed_state(score=4), clock=clock, stats_store=store, rng=no_power_up,
        )
        session.start()
        session.tick()
        assert session.state.is_game_over
        assert session.state.games_played == 1
        assert store.load() == Stats(best_score=4, games_played=1)

        clock.advance(150)
        session.tick()
        assert session.state.games_played == 1
        assert store.load().games_played == 1

    def test_restart_allows_next_recording(self, clock, store):
        session = GameSession(
            _doomed_state(), clock=clock, stats_store=store, rng=no_power_up,
        )
        session.start()
        session.tick()
        session.restart()
        assert not session.started
        assert not session.state.is_game_over
        assert session.state.games_played == 1

        session.state = replace(
            session.state, snake=build_body(Point(31, 8), Direction.RIGHT, 4),
        )
        session.start()
        clock.advance(150)
        session.tick()
        assert session.state.games_played == 2
        assert store.load().games_played == 2

    def test_start_after_game_over_is_ignored(self, clock):
        session = GameSession(_doomed_state(), clock=clock, rng=no_power_up)
        session.start()
        session.tick()
        session.start()
        assert session.state.is_game_over
        assert not session.running


class TestSessionRun:
    async def test_run_stops_at_game_over(self, clock):
        session = GameSession(_doomed_state(tick_ms=1), clock=clock, rng=no_power_up)
        session.start()
        ticks = []

        async def on_tick(s):
            ticks.append(s.state.score)

        await session.run(on_tick=on_tick)
        assert session.state.is_game_over
        assert len(ticks) == 1

    async def test_run_stops_when_paused(self, clock):
        state = replace(create_initial_state(seed=1), foods=(Point(2, 30),), tick_ms=1)
        session = GameSession(state, clock=clock, rng=no_power_up)
        session.start()
        calls = []

        async def on_tick(s):
            calls.append(s.state.head)
            s.toggle_pause()

        await session.run(on_tick=on_tick)
        assert calls == [Point(17, 16)]
        assert session.state.is_paused
        assert not session.state.is_game_over
