# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for the token lifecycle:
- POST /login - Exchange email and password for a token pair
- POST /refresh - Exchange a refresh token for a new access token
- POST /logout - Revoke the refresh token sent as the bearer credential

Example:
    POST /api/v1/auth/login
    {
        "email": "teacher@academy.io",
        "password": "secret1"
    }
"""

import logging

from fastapi import APIRouter, Depends

from academy_lms.api.dependencies import get_auth_service, require_bearer_token
from academy_lms.domains.auth.service import AuthService
from academy_lms.models.auth import (
    AccessTokenResponse,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
)
from academy_lms.models.common import MessageResponse, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=SuccessResponse[LoginResponse],
    summary="User login",
    description="Authenticate with email and password.",
)
async def login(
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> SuccessResponse[LoginResponse]:
    """Authenticate a user and open a session.

    A successful login replaces any refresh token previously issued to
    the same user.

    Args:
        data: Login credentials.
        auth_service: Authentication service.

    Returns:
        Access and refresh tokens with the user's profile.
    """
    result = await auth_service.login(data.email, data.password)
    return SuccessResponse(data=result)


@router.post(
    "/refresh",
    response_model=SuccessResponse[AccessTokenResponse],
    summary="Refresh access token",
    description="Get a new access token using the refresh token.",
)
async def refresh(
    data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> SuccessResponse[AccessTokenResponse]:
    """Mint a new access token.

    The refresh token itself is not rotated.
    """
    result = await auth_service.refresh(data.refresh_token)
    return SuccessResponse(data=result)


@router.post(
    "/logout",
    response_model=SuccessResponse[MessageResponse],
    summary="User logout",
    description="Revoke the refresh token given as the bearer credential.",
)
async def logout(
    refresh_token: str = Depends(require_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> SuccessResponse[MessageResponse]:
    await auth_service.logout(refresh_token)
    return SuccessResponse(data=MessageResponse(message="Logged out successfully"))
