"""Pydantic models for API request/response schemas."""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field

from candy_snake.snake import Direction


class SessionCommand(str, enum.Enum):
    """Non-directional commands accepted over the play socket."""

    START = "start"
    PAUSE = "pause"
    RESTART = "restart"


class CreateSessionRequest(BaseModel):
    """Request body for POST /sessions.

    Counts outside the allowed range are clamped, not rejected.
    """

    seed: int | None = None
    food_count: int | None = None
    enemy_count: int | None = None


class TurnRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/turn."""

    direction: Direction


class CountRequest(BaseModel):
    """Request body for the food-count and enemy-count endpoints."""

    count: int = Field(..., description="Requested count; clamped to bounds.")


class SessionSummary(BaseModel):
    """Compact session info for list endpoints."""

    session_id: str
    started: bool
    score: int
    is_paused: bool
    is_game_over: bool
    tick_ms: int


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    detail: str
