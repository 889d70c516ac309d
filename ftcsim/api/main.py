"""FastAPI application for the ftcsim match simulator.

Run with ``python -m ftcsim --serve`` or any ASGI server pointed at
``ftcsim.api.main:app``.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ftcsim import __version__
from ftcsim.api.routers import match_router, match_websocket_router
from ftcsim.api.services.session_manager import get_session_manager
from ftcsim.simulation import get_config

logger = logging.getLogger(__name__)

# Field renderer dev servers; override with a comma-separated FTCSIM_CORS_ORIGINS
DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"


def cors_origins() -> list[str]:
    raw = os.getenv("FTCSIM_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Validate config on startup; stop every tick loop on shutdown."""
    for error in get_config().validate():
        logger.warning(f"Config: {error}")
    logger.info(f"ftcsim API {__version__} ready")

    yield

    manager = get_session_manager()
    active = len(await manager.list_sessions())
    logger.info(f"ftcsim API shutting down, closing {active} session(s)")
    await manager.cleanup_all()


def create_app() -> FastAPI:
    """Build the application: match REST routes under /api/v1 plus the match WebSocket."""
    app = FastAPI(
        title="ftcsim API",
        description="Live robotics match simulation sessions",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(match_router, prefix="/api/v1")
    app.include_router(match_websocket_router)

    @app.get("/")
    async def root() -> dict:
        return {
            "name": "ftcsim",
            "version": __version__,
            "sessions": "/api/v1/match/sessions",
            "websocket": "/ws/match/{session_id}",
        }

    @app.get("/health")
    async def health() -> dict:
        sessions = await get_session_manager().list_sessions()
        return {"status": "healthy", "active_sessions": len(sessions)}

    return app


app = create_app()


def run_api(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Serve ``app`` with uvicorn."""
    uvicorn.run("ftcsim.api.main:app", host=host, port=port, reload=reload)
