"""
Main entrypoint for the Homeboard API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time
as ``app``, so it can be served directly, e.g.::

    uvicorn homeboard_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

from typing import Dict

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.logging_config import setup_logging


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Logging is configured first so that everything imported or run
    afterwards can log.  The database schema is migrated on startup.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health", tags=["health"])
    async def health() -> Dict[str, str]:
        return {"status": "ok", "version": settings.api_version}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file on first start.
        init_db()

    return app


app = create_app()
