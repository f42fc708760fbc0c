"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from candy_snake.server.routes import router
from candy_snake.server.session_manager import SessionManager
from candy_snake.server.websocket import ws_router
from candy_snake.stats import StatsStore


@asynccontextmanager
async def _lifespan(app: FastAPI):
    app.state.session_manager = SessionManager(stats_store=StatsStore())
    yield
    await app.state.session_manager.cleanup()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Candy Snake API", version="0.1.0", lifespan=_lifespan,
    )
    app.include_router(router)
    app.include_router(ws_router)
    return app
