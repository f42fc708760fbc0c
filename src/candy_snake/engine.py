"""Pure, step-based game engine.

Every operation takes a :class:`GameState` and returns a new one; nothing is
mutated in place. A call that changes nothing returns the input object
itself.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace

from candy_snake.config import DEFAULT_CONFIG, GameConfig
from candy_snake.effects import (
    ActiveEffects,
    PowerUpInstance,
    active_timers,
    apply_power_up,
    choose_power_up_type,
    cleanup_expired_effects,
    is_effect_active,
)
from candy_snake.enemy import (
    EnemySnake,
    choose_enemy_direction,
    dead_enemy,
    enemy_templates,
    is_move_blocked,
    live_enemy_cells,
    spawn_enemies,
    spawn_enemy,
)
from candy_snake.food import fill_foods, refill_food_at
from candy_snake.rng import Rng, chance, host_rng, random_empty_cell
from candy_snake.snake import Direction, Point, build_body, move_point

logger = logging.getLogger(__name__)

# Seed offsets for placements made inside a tick, relative to ``now``.
_PLAYER_REFILL_OFFSET = 10
_ENEMY_REFILL_OFFSET = 50
_ENEMY_RESPAWN_STRIDE = 31


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of a whole game.

    ``enemies`` is a slot tuple: ``enemies[i]`` always belongs to slot ``i``.
    """

    snake: tuple[Point, ...]
    enemies: tuple[EnemySnake, ...]
    direction: Direction
    queued_direction: Direction | None
    foods: tuple[Point, ...]
    food_count: int
    enemy_count: int
    power_up: PowerUpInstance | None
    effects: ActiveEffects
    score: int
    best_score: int
    games_played: int
    tick_ms: int
    is_paused: bool
    is_game_over: bool
    config: GameConfig = field(default=DEFAULT_CONFIG, repr=False)

    @property
    def head(self) -> Point:
        return self.snake[0]

    @property
    def live_enemies(self) -> list[EnemySnake]:
        return [e for e in self.enemies if e.alive]


# ---------------------------------------------------------------------------
# Tick duration
# ---------------------------------------------------------------------------


def compute_base_tick_ms(score: int, config: GameConfig = DEFAULT_CONFIG) -> int:
    """Tick length from score alone, floored at ``min_base_tick_ms``."""
    steps = score // config.score_per_speed_step
    reduced = config.initial_tick_ms - steps * config.speed_step_ms
    return max(config.min_base_tick_ms, reduced)


def compute_tick_ms(
    score: int,
    effects: ActiveEffects,
    now: float,
    config: GameConfig = DEFAULT_CONFIG,
) -> int:
    """Tick length including speed effects, rounded to whole milliseconds."""
    tick = float(compute_base_tick_ms(score, config))
    if is_effect_active(effects.speed_up_until, now):
        tick *= config.speed_up_multiplier
    if is_effect_active(effects.slow_down_until, now):
        tick *= config.slow_down_multiplier
    return max(config.min_tick_ms, _round_half_up(tick))


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


# ---------------------------------------------------------------------------
# Occupancy helpers
# ---------------------------------------------------------------------------


def _index_of(points: Sequence[Point], target: Point) -> int | None:
    return next((i for i, p in enumerate(points) if p == target), None)


def _occupied(
    snake: Iterable[Point],
    enemies: Iterable[EnemySnake],
    power_up: PowerUpInstance | None = None,
) -> set[Point]:
    cells = set(snake)
    cells |= live_enemy_cells(enemies)
    if power_up is not None:
        cells.add(power_up.position)
    return cells


def _slot(index: int, enemy: EnemySnake | None, config: GameConfig) -> EnemySnake:
    """Return *enemy*, or a dead placeholder for a slot that failed to spawn."""
    if enemy is not None:
        return enemy
    templates = enemy_templates(config.board)
    template = templates[index % len(templates)]
    return dead_enemy(index, template.hue, template.direction)


def _spawn_slots(
    indices: Sequence[int],
    occupied: Iterable[Point],
    seed: int | None,
    config: GameConfig,
) -> dict[int, EnemySnake]:
    placed = spawn_enemies(
        indices,
        occupied,
        config.board,
        length=config.enemy_initial_length,
        seed=seed,
        tries=config.enemy_placement_tries,
    )
    return {i: _slot(i, enemy, config) for i, enemy in placed.items()}


# ---------------------------------------------------------------------------
# Factory and mutators
# ---------------------------------------------------------------------------


def create_initial_state(
    seed: int | None = None, config: GameConfig | None = None,
) -> GameState:
    """Build a fresh, paused game with default entity counts."""
    cfg = config or DEFAULT_CONFIG
    board = cfg.board
    center = Point(board.width // 2, board.height // 2)
    snake = build_body(center, Direction.RIGHT, cfg.initial_snake_length)

    enemy_count = cfg.default_enemy_count
    food_count = cfg.default_food_count
    slots = _spawn_slots(range(enemy_count), snake, seed, cfg)
    enemies = tuple(slots[i] for i in range(enemy_count))
    foods = fill_foods(
        board, (), food_count, _occupied(snake, enemies), seed, cfg.food_fallback,
    )

    logger.info(
        "New game on %dx%d board (seed=%s).", board.width, board.height, seed,
    )
    return GameState(
        snake=snake,
        enemies=enemies,
        direction=Direction.RIGHT,
        queued_direction=None,
        foods=foods,
        food_count=food_count,
        enemy_count=enemy_count,
        power_up=None,
        effects=ActiveEffects(),
        score=0,
        best_score=0,
        games_played=0,
        tick_ms=cfg.initial_tick_ms,
        is_paused=True,
        is_game_over=False,
        config=cfg,
    )


def turn(state: GameState, direction: Direction | str) -> GameState:
    """Queue a direction change for the next tick.

    Only the latest accepted input before a tick is kept. A turn straight
    back against the queued (or current) heading is ignored. *direction*
    may be a :class:`Direction` or its string value.
    """
    if state.is_game_over:
        return state
    direction = Direction(direction)
    anchor = state.queued_direction if state.queued_direction is not None else state.direction
    if direction == anchor.opposite or direction == state.queued_direction:
        return state
    return replace(state, queued_direction=direction)


def toggle_pause(state: GameState) -> GameState:
    if state.is_game_over:
        return state
    return replace(state, is_paused=not state.is_paused)


def set_food_count(
    state: GameState, count: int, seed: int | None = None,
) -> GameState:
    """Change the food target, keeping as many current foods as fit."""
    cfg = state.config
    food_count = cfg.clamp_food_count(count)
    occupied = _occupied(state.snake, state.enemies, state.power_up)
    foods = fill_foods(
        cfg.board, state.foods, food_count, occupied, seed, cfg.food_fallback,
    )
    return replace(state, food_count=food_count, foods=foods)


def set_enemy_count(
    state: GameState, count: int, seed: int | None = None,
) -> GameState:
    """Change the enemy target.

    Live enemies in the remaining slots are kept; empty or dead slots are
    spawned afresh, then foods are re-placed around the new occupancy.
    """
    cfg = state.config
    enemy_count = cfg.clamp_enemy_count(count)
    kept = {
        i: enemy for i, enemy in enumerate(state.enemies[:enemy_count])
        if enemy.alive
    }
    missing = [i for i in range(enemy_count) if i not in kept]
    occupied = _occupied(state.snake, kept.values(), state.power_up)
    kept.update(_spawn_slots(missing, occupied, seed, cfg))
    enemies = tuple(kept[i] for i in range(enemy_count))

    foods = fill_foods(
        cfg.board,
        state.foods,
        state.food_count,
        _occupied(state.snake, enemies, state.power_up),
        seed,
        cfg.food_fallback,
    )
    return replace(state, enemy_count=enemy_count, enemies=enemies, foods=foods)


def restart(state: GameState, seed: int | None = None) -> GameState:
    """Start over, keeping count settings and lifetime stats."""
    fresh = create_initial_state(seed, state.config)
    fresh = set_food_count(fresh, state.food_count, seed)
    fresh = set_enemy_count(fresh, state.enemy_count, seed)
    return replace(
        fresh, best_score=state.best_score, games_played=state.games_played,
    )


def load_stats(state: GameState, best_score: int, games_played: int) -> GameState:
    """Seed a state with persisted lifetime stats."""
    return replace(
        state,
        best_score=max(state.best_score, best_score),
        games_played=games_played,
    )


def record_game_over(state: GameState) -> GameState:
    """Fold a finished game into the lifetime stats."""
    return replace(
        state,
        best_score=max(state.best_score, state.score),
        games_played=state.games_played + 1,
    )


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------


def step(state: GameState, now: float, rng: Rng | None = None) -> GameState:
    """Advance the game by one tick at wall-clock time *now* (ms).

    Placements made while resolving the tick are seeded from *now*; the
    power-up roll draws from *rng* (host entropy when omitted).
    """
    if state.is_game_over or state.is_paused:
        return state

    cfg = state.config
    board = cfg.board
    effects = cleanup_expired_effects(state.effects, now)
    move_direction = (
        state.queued_direction if state.queued_direction is not None else state.direction
    )

    # --- player look-ahead ---
    ghost_wall = is_effect_active(effects.ghost_wall_until, now)
    raw_head = move_point(state.head, move_direction)
    next_head = board.wrap(raw_head) if ghost_wall else raw_head
    hit_wall = board.out_of_bounds(raw_head) and not ghost_wall

    eaten_index = _index_of(state.foods, next_head)
    is_eating = eaten_index is not None
    future_body = state.snake if is_eating else state.snake[:-1]
    hit_self = next_head in future_body
    hit_enemy = next_head in live_enemy_cells(state.enemies)

    if hit_wall or hit_self or hit_enemy:
        return _resolve_collision(state, effects, move_direction, now)

    # --- move ---
    if is_eating:
        snake = (next_head, *state.snake)
        doubled = is_effect_active(effects.double_score_until, now)
        score = state.score + (2 if doubled else 1)
    else:
        snake = (next_head, *state.snake[:-1])
        score = state.score

    # --- power-up pickup ---
    power_up = state.power_up
    if power_up is not None and power_up.expires_at <= now:
        power_up = None
    if power_up is not None and power_up.position == next_head:
        effects, shorten_by = apply_power_up(
            effects,
            power_up.type,
            now,
            cfg.power_up_duration_ms,
            cfg.shorten_by,
        )
        if shorten_by > 0:
            target = max(cfg.min_snake_length, len(snake) - shorten_by)
            snake = snake[:target]
        power_up = None

    foods = state.foods
    if is_eating:
        foods = refill_food_at(
            board,
            foods,
            eaten_index,
            _occupied(snake, state.enemies, power_up),
            seed=int(now) + _PLAYER_REFILL_OFFSET,
        )

    # --- enemies, in slot order ---
    enemies, foods = _advance_enemies(state.enemies, snake, foods, power_up, now, cfg)

    # --- power-up spawn ---
    if power_up is None:
        power_up = _maybe_spawn_power_up(snake, enemies, foods, now, cfg, rng)

    return replace(
        state,
        snake=snake,
        enemies=enemies,
        direction=move_direction,
        queued_direction=None,
        effects=effects,
        power_up=power_up,
        foods=foods,
        score=score,
        best_score=max(state.best_score, score),
        tick_ms=compute_tick_ms(score, effects, now, cfg),
    )


def _resolve_collision(
    state: GameState,
    effects: ActiveEffects,
    move_direction: Direction,
    now: float,
) -> GameState:
    """Absorb a fatal move with the shield, or end the game."""
    tick_ms = compute_tick_ms(state.score, effects, now, state.config)
    if effects.shield:
        logger.debug("Shield absorbed a collision at %s.", now)
        return replace(
            state,
            direction=move_direction,
            queued_direction=None,
            effects=replace(effects, shield=False),
            tick_ms=tick_ms,
        )

    logger.info("Game over with score %d.", state.score)
    return replace(
        state,
        direction=move_direction,
        queued_direction=None,
        effects=effects,
        is_game_over=True,
        is_paused=True,
        tick_ms=tick_ms,
    )


def _advance_enemies(
    current: tuple[EnemySnake, ...],
    snake: tuple[Point, ...],
    foods: tuple[Point, ...],
    power_up: PowerUpInstance | None,
    now: float,
    cfg: GameConfig,
) -> tuple[tuple[EnemySnake, ...], tuple[Point, ...]]:
    """Move each live enemy once.

    Slots are updated in order, so each enemy sees earlier slots at their
    new positions and later slots where they started the tick.
    """
    board = cfg.board
    player_cells = set(snake)
    enemies = list(current)

    for index, enemy in enumerate(current):
        if not enemy.alive:
            continue

        other_cells = live_enemy_cells(e for j, e in enumerate(enemies) if j != index)
        direction = choose_enemy_direction(
            enemy, foods, player_cells, other_cells, board,
        )
        next_head = move_point(enemy.head, direction)

        if is_move_blocked(enemy, next_head, foods, player_cells, other_cells, board):
            occupied = player_cells | other_cells | set(foods)
            if power_up is not None:
                occupied.add(power_up.position)
            respawn = spawn_enemy(
                index,
                occupied,
                board,
                length=cfg.enemy_initial_length,
                seed=int(now) + index * _ENEMY_RESPAWN_STRIDE,
                tries=cfg.enemy_placement_tries,
            )
            if respawn is None:
                enemies[index] = dead_enemy(index, enemy.hue, enemy.direction)
            else:
                logger.debug("Enemy %s respawned.", respawn.id)
                enemies[index] = respawn
            continue

        food_index = _index_of(foods, next_head)
        if food_index is not None:
            body = (next_head, *enemy.body)
        else:
            body = (next_head, *enemy.body[:-1])
        enemies[index] = replace(enemy, body=body, direction=direction)

        if food_index is not None:
            foods = refill_food_at(
                board,
                foods,
                food_index,
                _occupied(snake, enemies, power_up),
                seed=int(now) + _ENEMY_REFILL_OFFSET + index,
            )

    return tuple(enemies), foods


def _maybe_spawn_power_up(
    snake: tuple[Point, ...],
    enemies: tuple[EnemySnake, ...],
    foods: tuple[Point, ...],
    now: float,
    cfg: GameConfig,
    rng: Rng | None,
) -> PowerUpInstance | None:
    rng = rng if rng is not None else host_rng()
    if not chance(cfg.power_up_spawn_chance, rng):
        return None
    occupied = _occupied(snake, enemies)
    occupied.update(foods)
    position = random_empty_cell(cfg.board, occupied, rng)
    if position is None:
        return None
    power_up = PowerUpInstance(
        type=choose_power_up_type(rng, cfg.power_up_weights),
        position=position,
        expires_at=now + cfg.power_up_ttl_ms,
    )
    logger.debug("Spawned %s at %s.", power_up.type.value, tuple(position))
    return power_up


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def to_dict(state: GameState, now: float | None = None) -> dict:
    """Return a JSON-serializable snapshot for rendering clients."""
    result = {
        "board": {
            "width": state.config.board_width,
            "height": state.config.board_height,
        },
        "snake": [p.to_dict() for p in state.snake],
        "enemies": [e.to_dict() for e in state.enemies],
        "direction": state.direction.value,
        "queued_direction": (
            state.queued_direction.value if state.queued_direction is not None else None
        ),
        "foods": [p.to_dict() for p in state.foods],
        "food_count": state.food_count,
        "enemy_count": state.enemy_count,
        "power_up": state.power_up.to_dict() if state.power_up is not None else None,
        "effects": state.effects.to_dict(),
        "score": state.score,
        "best_score": state.best_score,
        "games_played": state.games_played,
        "tick_ms": state.tick_ms,
        "is_paused": state.is_paused,
        "is_game_over": state.is_game_over,
    }
    if now is not None:
        result["timers"] = active_timers(state.effects, now)
    return result
