"""In-memory session registry and async tick loops."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field

from starlette.websockets import WebSocket, WebSocketState

from candy_snake.config import GameConfig
from candy_snake.engine import to_dict
from candy_snake.server.models import SessionSummary
from candy_snake.session import GameSession
from candy_snake.stats import StatsStore

logger = logging.getLogger(__name__)

_MAX_SESSIONS = 100


@dataclass
class SessionInstance:
    """A game session plus its connection and loop bookkeeping."""

    session_id: str
    session: GameSession
    websocket: WebSocket | None = None
    created_at: float = field(default_factory=time.monotonic)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _task: asyncio.Task | None = field(default=None, repr=False)

    def summary(self) -> SessionSummary:
        state = self.session.state
        return SessionSummary(
            session_id=self.session_id,
            started=self.session.started,
            score=state.score,
            is_paused=state.is_paused,
            is_game_over=state.is_game_over,
            tick_ms=state.tick_ms,
        )

    def snapshot(self) -> dict:
        """Serializable state plus the last pickup event."""
        session = self.session
        event = session.last_event
        return {
            "session_id": self.session_id,
            "started": session.started,
            "event": event.to_dict() if event is not None else None,
            "state": to_dict(session.state, session.clock()),
        }


class SessionManager:
    """Central registry managing all sessions."""

    def __init__(
        self,
        stats_store: StatsStore | None = None,
        config: GameConfig | None = None,
        max_sessions: int = _MAX_SESSIONS,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1.")
        self._sessions: dict[str, SessionInstance] = {}
        self._stats_store = stats_store
        self._config = config
        self._max_sessions = max_sessions

    async def create_session(
        self,
        seed: int | None = None,
        food_count: int | None = None,
        enemy_count: int | None = None,
    ) -> SessionInstance:
        """Create a paused session and return its instance."""
        await self._evict_oldest()
        session = GameSession(
            seed=seed, config=self._config, stats_store=self._stats_store,
        )
        if food_count is not None:
            session.set_food_count(food_count)
        if enemy_count is not None:
            session.set_enemy_count(enemy_count)

        session_id = uuid.uuid4().hex[:12]
        instance = SessionInstance(session_id=session_id, session=session)
        self._sessions[session_id] = instance
        logger.info("Session %s created (seed=%s).", session_id, seed)
        return instance

    def get_session(self, session_id: str) -> SessionInstance | None:
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> SessionInstance:
        instance = self._sessions.get(session_id)
        if instance is None:
            raise KeyError(f"Session {session_id} not found.")
        return instance

    def list_sessions(self) -> list[SessionSummary]:
        return [s.summary() for s in self._sessions.values()]

    async def delete_session(self, session_id: str) -> None:
        instance = self._sessions.pop(session_id, None)
        if instance is None:
            raise KeyError(f"Session {session_id} not found.")
        await self._stop(instance)
        logger.info("Session %s deleted.", session_id)

    async def _evict_oldest(self) -> None:
        """Bound the registry by dropping the oldest idle session."""
        if len(self._sessions) < self._max_sessions:
            return
        idle = [
            s for s in self._sessions.values()
            if s._task is None or s._task.done()
        ]
        if not idle:
            raise ValueError("Too many active sessions. Try again later.")
        oldest = min(idle, key=lambda s: s.created_at)
        self._sessions.pop(oldest.session_id, None)
        await self._stop(oldest)
        logger.info("Evicted idle session %s.", oldest.session_id)

    def ensure_running(self, instance: SessionInstance) -> None:
        """Start the tick loop if the session is live and no loop is active."""
        if not instance.session.running:
            return
        if instance._task is not None and not instance._task.done():
            return
        instance._task = asyncio.create_task(self._tick_loop(instance))

    async def _tick_loop(self, instance: SessionInstance) -> None:
        """Drive the session, broadcasting state after every tick."""

        async def _on_tick(_: GameSession) -> None:
            await self.broadcast(instance)

        try:
            await instance.session.run(on_tick=_on_tick, lock=instance.lock)
        except asyncio.CancelledError:
            logger.info("Tick loop cancelled for session %s.", instance.session_id)
        except Exception:
            logger.exception("Tick loop error in session %s.", instance.session_id)

    async def broadcast(self, instance: SessionInstance) -> None:
        """Send the current snapshot to the connected client, if any."""
        ws = instance.websocket
        if ws is None:
            return
        payload = json.dumps(instance.snapshot(), separators=(",", ":"))
        try:
            if ws.client_state == WebSocketState.CONNECTED:
                await ws.send_text(payload)
        except Exception:
            logger.warning(
                "Dropping socket for session %s after send failure.",
                instance.session_id,
            )
            instance.websocket = None

    async def _stop(self, instance: SessionInstance) -> None:
        task = instance._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        ws = instance.websocket
        instance.websocket = None
        if ws is None:
            return
        try:
            if ws.client_state == WebSocketState.CONNECTED:
                await ws.close(code=1000, reason="Session closed.")
        except Exception:
            logger.warning("Failed closing socket for session %s.", instance.session_id)

    async def cleanup(self) -> None:
        """Cancel all running tick loops."""
        for instance in list(self._sessions.values()):
            await self._stop(instance)
        logger.info("SessionManager cleanup complete.")
