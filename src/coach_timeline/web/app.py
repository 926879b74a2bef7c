"""
FastAPI application for the Coach Timeline dashboard.

PURPOSE: Application factory and server runner.
AI CONTEXT: Creates the app with all routes registered.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ..__version__ import __version__
from ..config import Config
from .routes import router

__all__ = ["create_app", "run_dashboard"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
    """
    Log dashboard startup and shutdown.

    Args:
        app: The FastAPI application instance (provided by FastAPI).

    Yields:
        None. Control returns to FastAPI to handle requests.
    """
    logger.info("Coach Timeline dashboard starting (v%s)", __version__)
    logger.info("Reading data from %s", Config.get_storage_dir())
    if Config.get_admin_token() is None:
        logger.warning("COACH_TIMELINE_ADMIN_TOKEN not set; /api routes are open")
    yield
    logger.info("Coach Timeline dashboard shutting down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI dashboard application.

    Application factory, so tests and uvicorn's factory mode each get a
    fresh instance.

    Business context: Serves the coach's day schedule as HTML and the
    timeline, attendance, session and challenge data as JSON for the
    admin tools.

    Returns:
        FastAPI application with all routes registered and OpenAPI docs
        at /docs.

    Example:
        >>> from fastapi.testclient import TestClient
        >>> client = TestClient(create_app())
        >>> client.get('/').status_code
        200
    """
    app = FastAPI(
        title="Coach Timeline",
        description="Coach day schedule, class attendance and timed challenges",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


def run_dashboard(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Launch the dashboard with uvicorn.

    Blocks until the server is stopped (Ctrl+C).

    Args:
        host: Interface to bind. '127.0.0.1' (default) for local only,
            '0.0.0.0' for the gym network.
        port: TCP port. Default 8000.
        reload: Auto-reload on code changes, for development.
        log_level: Uvicorn log level ('info' by default).

    Raises:
        OSError: If the port is already in use.

    Example:
        >>> run_dashboard(host='0.0.0.0', port=8080)
    """
    uvicorn.run(
        "coach_timeline.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


if __name__ == "__main__":
    run_dashboard()
