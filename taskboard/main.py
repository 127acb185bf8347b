"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from taskboard.core.config import settings
from taskboard.core.logging_config import configure_logging
from taskboard.db.session import init_models
from taskboard.errors import AppError, app_error_handler, unhandled_error_handler, validation_error_handler
from taskboard.routers import auth, directory, health, tasks, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    - On startup: configure logging and create missing tables when enabled.
    - On shutdown: log.
    """
    configure_logging()
    logger.info("Starting %s...", settings.APP_NAME)
    if settings.AUTO_CREATE_TABLES:
        await init_models()

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Kanban task board API with role-based permissions",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include routers (API endpoints)
    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(tasks.router)
    app.include_router(directory.router)
    return app


app = create_app()
