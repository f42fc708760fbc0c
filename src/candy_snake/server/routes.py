"""REST API route handlers for session lifecycle and commands."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter, HTTPException, Request, Response

from candy_snake.server.models import (
    CountRequest,
    CreateSessionRequest,
    ErrorResponse,
    SessionSummary,
    TurnRequest,
)
from candy_snake.server.session_manager import SessionInstance, SessionManager
from candy_snake.session import GameSession

router = APIRouter(
    prefix="/sessions",
    tags=["sessions"],
    responses={404: {"model": ErrorResponse}},
)


def _get_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def _lookup(request: Request, session_id: str) -> SessionInstance:
    try:
        return _get_manager(request).require_session(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


async def _apply(
    request: Request,
    session_id: str,
    command: Callable[[GameSession], None],
) -> dict:
    """Run a command under the session lock and (re)arm its tick loop."""
    instance = _lookup(request, session_id)
    async with instance.lock:
        command(instance.session)
    _get_manager(request).ensure_running(instance)
    return instance.snapshot()


@router.post("", status_code=201)
async def create_session(body: CreateSessionRequest, request: Request) -> dict:
    """Create a new paused session."""
    manager = _get_manager(request)
    try:
        instance = await manager.create_session(
            seed=body.seed,
            food_count=body.food_count,
            enemy_count=body.enemy_count,
        )
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc)) from exc
    return instance.snapshot()


@router.get("")
async def list_sessions(request: Request) -> list[SessionSummary]:
    return _get_manager(request).list_sessions()


@router.get("/{session_id}")
async def get_session(session_id: str, request: Request) -> dict:
    """Get the current snapshot of a session."""
    return _lookup(request, session_id).snapshot()


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str, request: Request) -> Response:
    try:
        await _get_manager(request).delete_session(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@router.post("/{session_id}/turn")
async def turn(session_id: str, body: TurnRequest, request: Request) -> dict:
    return await _apply(request, session_id, lambda s: s.turn(body.direction))


@router.post("/{session_id}/start")
async def start(session_id: str, request: Request) -> dict:
    return await _apply(request, session_id, GameSession.start)


@router.post("/{session_id}/pause")
async def pause(session_id: str, request: Request) -> dict:
    """Toggle pause."""
    return await _apply(request, session_id, GameSession.toggle_pause)


@router.post("/{session_id}/restart")
async def restart(session_id: str, request: Request) -> dict:
    return await _apply(request, session_id, GameSession.restart)


@router.post("/{session_id}/food-count")
async def food_count(session_id: str, body: CountRequest, request: Request) -> dict:
    return await _apply(request, session_id, lambda s: s.set_food_count(body.count))


@router.post("/{session_id}/enemy-count")
async def enemy_count(session_id: str, body: CountRequest, request: Request) -> dict:
    return await _apply(request, session_id, lambda s: s.set_enemy_count(body.count))
