# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the RiseTrack API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from src.api.errors import register_exception_handlers
from src.api.middleware.auth import AuthMiddleware
from src.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import get_settings
from src.infrastructure.database.connection import close_database, init_database
from src.infrastructure.database.migrations.runner import run_migrations
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.
    Initializes and cleans up:
    - Structured logging
    - Pending schema migrations (when DB_AUTO_MIGRATE is set)
    - Database engine and sessionmaker

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting %s API (environment=%s, debug=%s)",
        settings.app_name, settings.environment, settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================

    if settings.database.auto_migrate:
        applied = await run_migrations(settings.database.url)
        logger.info("Applied %d migration(s) at startup", len(applied))

    await init_database(settings)
    logger.info("Database connection initialized")

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    try:
        await close_database()
        logger.info("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection: %s", str(e))

    logger.info("Shutting down %s API", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="School behavior-management backend: RISE point sheets and level progression",
        version="1.0.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Redirects from /path to /path/ drop the Authorization header
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.limiter = limiter

    # =========================================================================
    # Exception handlers
    # =========================================================================
    register_exception_handlers(app)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================

    # Auth middleware - records the Bearer token and principal
    app.add_middleware(AuthMiddleware)

    # Request context - request id and access log
    app.add_middleware(RequestContextMiddleware)

    # CORS middleware (should be last to execute first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
