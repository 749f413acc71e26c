# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the academy LMS API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from academy_lms import __version__
from academy_lms.api.error_handling import register_exception_handlers
from academy_lms.api.middleware.auth import AuthMiddleware
from academy_lms.api.middleware.rate_limit import RateLimitMiddleware
from academy_lms.api.routes import health_router
from academy_lms.api.v1 import router as v1_router
from academy_lms.core.config import Settings, get_settings
from academy_lms.domains.auth.jwt import JWTManager
from academy_lms.domains.auth.password import PasswordHasher
from academy_lms.infrastructure.cache import close_cache, init_cache
from academy_lms.infrastructure.database.connection import close_database, init_database
from academy_lms.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes and cleans up:
    - Database connection pool (and tables, when configured)
    - Key-value store (Redis or in-memory)

    A failure to reach either store aborts startup.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info(
        "Starting academy LMS API: environment=%s, debug=%s",
        settings.environment,
        settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================

    try:
        await init_database(settings)
        logger.info("Database connection initialized")
    except Exception as e:
        logger.error("Failed to initialize database connection: %s", str(e))
        raise

    try:
        await init_cache(settings)
        logger.info("Key-value store initialized: %s", settings.cache.backend)
    except Exception as e:
        logger.error("Failed to initialize key-value store: %s", str(e))
        await close_database()
        raise

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    try:
        await close_cache()
        logger.info("Key-value store closed")
    except Exception as e:
        logger.warning("Error closing key-value store: %s", str(e))

    try:
        await close_database()
        logger.info("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection: %s", str(e))

    logger.info("Shutting down academy LMS API")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Loaded from the environment if omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Academy LMS API",
        description="Multi-tenant learning management backend",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Disable automatic redirects from /path to /path/
        # This prevents 307 redirects that lose Authorization headers
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    jwt_manager = JWTManager(settings.jwt)
    app.state.settings = settings
    app.state.jwt_manager = jwt_manager
    app.state.password_hasher = PasswordHasher(rounds=settings.security.bcrypt_rounds)

    # =========================================================================
    # Exception handlers
    # =========================================================================
    register_exception_handlers(app)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================

    # Auth middleware - validates JWT tokens
    app.add_middleware(AuthMiddleware, settings=settings, jwt_manager=jwt_manager)

    # Rate limiting runs before authentication
    app.add_middleware(RateLimitMiddleware, settings=settings)

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
    app.include_router(health_router)
    app.include_router(v1_router)

    return app
