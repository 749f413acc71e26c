# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response models."""

from pydantic import BaseModel, EmailStr, Field

from academy_lms.models.user import UserResponse


class LoginRequest(BaseModel):
    """Credentials for POST /auth/login."""

    email: EmailStr = Field(description="Account email address")
    password: str = Field(min_length=1, description="Account password")


class RefreshTokenRequest(BaseModel):
    """Body of POST /auth/refresh."""

    refresh_token: str = Field(min_length=1, description="Refresh token from login")


class TokenResponse(BaseModel):
    """Access/refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")


class LoginResponse(TokenResponse):
    """Token pair plus the public view of the authenticated user."""

    user: UserResponse


class AccessTokenResponse(BaseModel):
    """New access token minted from a refresh token."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")
