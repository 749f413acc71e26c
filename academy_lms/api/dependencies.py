# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get the authenticated user
- Get service instances wired with the application's shared components

Shared components (settings, JWT manager, password hasher) are created
once at startup and kept on app.state.

Example:
    @router.get("/courses")
    async def list_courses(
        current_user: AuthUser,
        service: CourseService = Depends(get_course_service),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy_lms.api.middleware.auth import extract_bearer_token, get_current_user
from academy_lms.core.config.settings import Settings
from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.domains.auth.jwt import JWTManager
from academy_lms.domains.auth.password import PasswordHasher
from academy_lms.domains.auth.service import AuthService
from academy_lms.domains.auth.session_store import SessionStore
from academy_lms.domains.authorization.engine import AuthorizationEngine
from academy_lms.domains.course.service import CourseService
from academy_lms.domains.lesson.service import LessonService
from academy_lms.domains.material.service import MaterialService
from academy_lms.domains.user.service import UserService
from academy_lms.infrastructure.cache import get_cache
from academy_lms.infrastructure.database.connection import get_session

logger = logging.getLogger(__name__)

_engine = AuthorizationEngine()


# =========================================================================
# Infrastructure Dependencies
# =========================================================================


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_jwt_manager(request: Request) -> JWTManager:
    return request.app.state.jwt_manager


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_session_store(request: Request) -> SessionStore:
    """Get the refresh token store over the shared key-value store."""
    settings = get_app_settings(request)
    return SessionStore(get_cache(), ttl_seconds=settings.jwt.refresh_token_ttl_seconds)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the duration of the request.

    Yields:
        AsyncSession, rolled back if the endpoint raises.
    """
    async with get_session() as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_bearer_token(request: Request) -> str:
    """Require an ``Authorization: Bearer`` header and return its token.

    Raises:
        HTTPException: If the header is missing or malformed.
    """
    token = extract_bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


DbSession = Annotated[AsyncSession, Depends(get_db)]
AuthUser = Annotated[CurrentUser, Depends(require_auth)]


# =========================================================================
# Service Dependencies
# =========================================================================


def get_auth_service(
    db: DbSession,
    jwt_manager: JWTManager = Depends(get_jwt_manager),
    session_store: SessionStore = Depends(get_session_store),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthService:
    return AuthService(db, jwt_manager, session_store, password_hasher)


def get_user_service(
    db: DbSession,
    session_store: SessionStore = Depends(get_session_store),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(db, password_hasher, engine=_engine, session_store=session_store)


def get_course_service(db: DbSession) -> CourseService:
    return CourseService(db, engine=_engine)


def get_lesson_service(db: DbSession) -> LessonService:
    return LessonService(db, engine=_engine)


def get_material_service(db: DbSession) -> MaterialService:
    return MaterialService(db, engine=_engine)
