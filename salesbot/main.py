"""
Application factory for the SalesBot API.

Run with: uvicorn salesbot.main:app
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from salesbot.config import get_settings
from salesbot.core.app_state import AppState
from salesbot.db import Base, get_engine, get_session_factory
from salesbot.infra.error_reporting import init_error_reporting
from salesbot.infra.logging_config import LoggingConfig, get_logger
from salesbot.routers import system, webhooks
from salesbot.routers.conversations_router import conversations_router
from salesbot.routers.modules_router import modules_router

logger = get_logger("main")


def create_app(testing: bool = False, state: Optional[AppState] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        testing: skip error reporting setup and create tables on the configured engine.
        state: prebuilt application state; built from the database session factory when omitted.
    """
    settings = get_settings()
    LoggingConfig(settings.log_level)
    if not testing:
        init_error_reporting(settings)

    if state is None:
        if testing or settings.uses_sqlite:
            Base.metadata.create_all(bind=get_engine())
        state = AppState.from_session_factory(get_session_factory(), settings=settings)

    app = FastAPI(title=settings.app_name)
    app.state.salesbot = state

    app.include_router(webhooks.router)
    app.include_router(modules_router)
    app.include_router(conversations_router)
    app.include_router(system.router)

    logger.info(
        "%s started (%s, %d backends)",
        settings.app_name,
        settings.environment,
        len(state.gateway.registry.list_backends()),
    )
    return app


app = create_app()
