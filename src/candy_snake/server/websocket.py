"""WebSocket handler for real-time play."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from candy_snake.server.models import SessionCommand
from candy_snake.server.session_manager import SessionManager
from candy_snake.session import GameSession
from candy_snake.snake import Direction

logger = logging.getLogger(__name__)

ws_router = APIRouter()

_COMMANDS = {
    SessionCommand.START: GameSession.start,
    SessionCommand.PAUSE: GameSession.toggle_pause,
    SessionCommand.RESTART: GameSession.restart,
}


def _get_manager(ws: WebSocket) -> SessionManager:
    return ws.app.state.session_manager


def _parse(raw: str):
    """Map a client message to a session command, or ``None`` if invalid."""
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(msg, dict):
        return None

    direction = msg.get("direction")
    if isinstance(direction, str):
        try:
            parsed = Direction(direction.lower())
        except ValueError:
            return None
        return lambda s: s.turn(parsed)

    command = msg.get("command")
    if isinstance(command, str):
        try:
            return _COMMANDS[SessionCommand(command.lower())]
        except ValueError:
            return None
    return None


@ws_router.websocket("/sessions/{session_id}/play")
async def play(websocket: WebSocket, session_id: str) -> None:
    """Send directions and commands, receive a snapshot after each change."""
    manager = _get_manager(websocket)
    instance = manager.get_session(session_id)
    if instance is None:
        await websocket.close(code=4004, reason="Session not found.")
        return

    await websocket.accept()

    # One live socket per session; a new connection replaces the old one.
    previous_ws = instance.websocket
    if previous_ws is not None and previous_ws is not websocket:
        try:
            await previous_ws.close(code=4008, reason="Replaced by new connection.")
        except Exception:
            logger.warning("Failed closing previous socket for session %s.", session_id)
    instance.websocket = websocket
    logger.info("Client connected to session %s.", session_id)

    await manager.broadcast(instance)

    try:
        while True:
            raw = await websocket.receive_text()
            command = _parse(raw)
            if command is None:
                continue
            async with instance.lock:
                command(instance.session)
            manager.ensure_running(instance)
            await manager.broadcast(instance)
    except WebSocketDisconnect:
        logger.info("Client disconnected from session %s.", session_id)
    finally:
        if instance.websocket is websocket:
            instance.websocket = None
