"""Best-score and games-played persistence."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

STATS_KEY = "candy-snake:stats"
DEFAULT_STATS_PATH = Path.home() / ".candy_snake" / "stats.json"


@dataclass(frozen=True)
class Stats:
    best_score: int = 0
    games_played: int = 0

    def to_dict(self) -> dict:
        return {"bestScore": self.best_score, "gamesPlayed": self.games_played}


def _as_count(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return int(value)


class StatsStore:
    """JSON-file store keeping stats under a single fixed key.

    Storage failures never propagate: loading falls back to zeroed stats and
    saving logs the error and carries on.
    """

    def __init__(self, path: str | Path = DEFAULT_STATS_PATH) -> None:
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            raw = json.loads(self.path.read_text())
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Could not read stats from %s: %s", self.path, exc)
            return {}
        return raw if isinstance(raw, dict) else {}

    def load(self) -> Stats:
        entry = self._read().get(STATS_KEY)
        if not isinstance(entry, dict):
            return Stats()
        return Stats(
            best_score=_as_count(entry.get("bestScore")),
            games_played=_as_count(entry.get("gamesPlayed")),
        )

    def save(self, stats: Stats) -> None:
        data = self._read()
        data[STATS_KEY] = stats.to_dict()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2))
        except OSError as exc:
            logger.warning("Could not save stats to %s: %s", self.path, exc)
            return
        logger.info(
            "Stats saved (best=%d, played=%d).", stats.best_score, stats.games_played,
        )
