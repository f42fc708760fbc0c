"""Real-time driver around the pure engine.

A :class:`GameSession` owns one evolving :class:`GameState`, feeds it
wall-clock timestamps, re-arms its tick period whenever ``tick_ms`` changes
and records finished games in a :class:`StatsStore`.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace

from candy_snake import engine
from candy_snake.config import GameConfig
from candy_snake.engine import GameState
from candy_snake.rng import Rng, create_rng
from candy_snake.snake import Direction, Point
from candy_snake.stats import Stats, StatsStore

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def wall_clock_ms() -> float:
    return time.time() * 1000.0


class ConsumptionKind(str, enum.Enum):
    FOOD = "food"
    POWER_UP = "power_up"


@dataclass(frozen=True)
class ConsumptionEvent:
    """Something the player picked up at ``position`` on the last tick."""

    kind: ConsumptionKind
    position: Point

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "position": self.position.to_dict()}


def detect_consumption(prev: GameState, nxt: GameState) -> ConsumptionEvent | None:
    """Derive a pickup event by comparing consecutive snapshots.

    A power-up pickup takes precedence when both happen on the same tick.
    """
    head = nxt.head
    ate_food = nxt.score > prev.score
    took_power_up = (
        prev.power_up is not None
        and nxt.power_up is None
        and head == prev.power_up.position
    )
    if took_power_up:
        return ConsumptionEvent(ConsumptionKind.POWER_UP, head)
    if ate_food:
        return ConsumptionEvent(ConsumptionKind.FOOD, head)
    return None


class GameSession:
    """Single-player game loop.

    The game stays paused until :meth:`start` or the first direction input.
    Pausing is only possible once started.
    """

    def __init__(
        self,
        state: GameState | None = None,
        *,
        seed: int | None = None,
        config: GameConfig | None = None,
        stats_store: StatsStore | None = None,
        clock: Clock = wall_clock_ms,
        rng: Rng | None = None,
    ) -> None:
        self.seed = seed
        self.clock = clock
        self.rng = rng if rng is not None or seed is None else create_rng(seed)
        self.stats_store = stats_store
        self.state = state if state is not None else engine.create_initial_state(seed, config)
        if stats_store is not None:
            stats = stats_store.load()
            self.state = engine.load_stats(
                self.state, stats.best_score, stats.games_played,
            )
        self.started = False
        self.last_event: ConsumptionEvent | None = None
        self._game_over_recorded = False

    @property
    def running(self) -> bool:
        return self.started and not self.state.is_paused and not self.state.is_game_over

    def start(self) -> None:
        if self.state.is_game_over:
            return
        self.started = True
        self.state = replace(self.state, is_paused=False)

    def turn(self, direction: Direction) -> None:
        """Queue a turn; the first input also starts the game."""
        was_over = self.state.is_game_over
        self.state = engine.turn(self.state, direction)
        if not self.started and not was_over:
            self.state = replace(self.state, is_paused=False)
        self.started = True

    def toggle_pause(self) -> None:
        if not self.started or self.state.is_game_over:
            return
        self.state = engine.toggle_pause(self.state)

    def restart(self) -> None:
        self.state = engine.restart(self.state, self.seed)
        self.started = False
        self.last_event = None
        self._game_over_recorded = False
        logger.info("Session restarted (games played=%d).", self.state.games_played)

    def set_food_count(self, count: int) -> None:
        self.state = engine.set_food_count(self.state, count, self.seed)

    def set_enemy_count(self, count: int) -> None:
        self.state = engine.set_enemy_count(self.state, count, self.seed)

    def tick(self) -> GameState:
        """Advance one step at the current clock time."""
        prev = self.state
        nxt = engine.step(prev, self.clock(), self.rng)
        self.last_event = detect_consumption(prev, nxt) if nxt is not prev else None
        self.state = nxt
        if nxt.is_game_over and not self._game_over_recorded:
            self._record_game_over()
        return self.state

    def _record_game_over(self) -> None:
        self.state = engine.record_game_over(self.state)
        self._game_over_recorded = True
        if self.stats_store is not None:
            self.stats_store.save(
                Stats(self.state.best_score, self.state.games_played),
            )

    async def run(
        self,
        on_tick: Callable[[GameSession], Awaitable[None]] | None = None,
        lock: asyncio.Lock | None = None,
    ) -> None:
        """Tick until paused or game over.

        The sleep is re-read from ``state.tick_ms`` every iteration, so speed
        changes take effect on the following tick.
        """
        lock = lock or asyncio.Lock()
        logger.info("Session loop started.")
        while self.running:
            await asyncio.sleep(self.state.tick_ms / 1000.0)
            async with lock:
                if not self.running:
                    break
                self.tick()
            if on_tick is not None:
                await on_tick(self)
        logger.info("Session loop stopped (score=%d).", self.state.score)
