"""Command-line tools for headless simulation and stats inspection."""

from __future__ import annotations

import argparse
import json
import logging
import sys

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="candy-snake",
        description="Candy Snake headless simulation and stats tools.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- simulate ---
    sim_p = sub.add_parser(
        "simulate", help="Run a seeded game without a display.",
    )
    sim_p.add_argument("--seed", type=int, default=0)
    sim_p.add_argument("--ticks", type=int, default=500)
    sim_p.add_argument("--food", type=int, default=None)
    sim_p.add_argument("--enemies", type=int, default=None)
    sim_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON game config file.",
    )
    sim_p.add_argument(
        "--start-ms", type=int, default=0,
        help="Clock value of the first tick.",
    )

    # --- stats ---
    stats_p = sub.add_parser("stats", help="Show stored best score and games played.")
    stats_p.add_argument("--path", type=str, default=None)

    return parser


def _run_simulate(args: argparse.Namespace) -> int:
    from candy_snake.config import GameConfig
    from candy_snake.session import GameSession

    config = GameConfig.load(args.config) if args.config else None
    clock_ms = [float(args.start_ms)]
    session = GameSession(seed=args.seed, config=config, clock=lambda: clock_ms[0])
    if args.food is not None:
        session.set_food_count(args.food)
    if args.enemies is not None:
        session.set_enemy_count(args.enemies)

    session.start()
    ticks = 0
    pickups = 0
    while ticks < args.ticks and session.running:
        clock_ms[0] += session.state.tick_ms
        session.tick()
        ticks += 1
        if session.last_event is not None:
            pickups += 1

    state = session.state
    summary = {
        "seed": args.seed,
        "ticks": ticks,
        "elapsed_ms": clock_ms[0] - args.start_ms,
        "score": state.score,
        "length": len(state.snake),
        "pickups": pickups,
        "is_game_over": state.is_game_over,
        "live_enemies": len(state.live_enemies),
        "tick_ms": state.tick_ms,
    }
    print(json.dumps(summary, indent=2))  # noqa: T201
    return 0


def _run_stats(args: argparse.Namespace) -> int:
    from candy_snake.stats import StatsStore

    store = StatsStore(args.path) if args.path else StatsStore()
    print(json.dumps(store.load().to_dict()))  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``candy-snake`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "simulate": _run_simulate,
        "stats": _run_stats,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
