"""
FastAPI application entrypoint for the Batch Shot API.

This module sets up the FastAPI app, configures logging, builds the browser
session manager (including the one-time stealth capability check) and
registers route handlers. The browser UI, when present, is served from
STATIC_DIR at the root.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.routes import capture
from api.schemas import HealthResponse
from shared.config import AppConfig, get_config
from shared.logging import configure_logging, get_logger
from worker.capture import SessionManager, build_stealth_launcher


def create_app(
    config: Optional[AppConfig] = None,
    session_manager: Optional[SessionManager] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or get_config()

    # Configure structured logging
    log_level = logging.getLevelName(config.log_level.upper())
    configure_logging(
        level=log_level,
        log_file=config.log_file,
        log_stdout=config.log_stdout,
    )
    logger = get_logger(__name__)

    if session_manager is None:
        session_manager = SessionManager(
            launcher=build_stealth_launcher(),
            profile_dir=config.stealth_profile_dir,
        )

    app = FastAPI(
        title="Batch Shot API",
        description="Batch full-page screenshots with an optional interactive stealth browser",
        version="0.1.0",
    )
    app.state.config = config
    app.state.session_manager = session_manager

    # CORS middleware (permissive; the server binds to localhost by default)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register route handlers
    app.include_router(capture.router)

    @app.get("/health", response_model=HealthResponse)
    def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            stealth_capable=session_manager.launcher.capable,
        )

    # Mounted last: a mount at "/" would shadow routes registered after it.
    if config.static_dir and Path(config.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="ui")
        logger.info("static_ui_mounted", directory=config.static_dir)

    logger.info(
        "app_created",
        environment=config.environment,
        downloads_dir=config.downloads_dir,
        stealth_capable=session_manager.launcher.capable,
    )
    return app
