# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain: tokens, passwords, identity and sessions."""

from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.domains.auth.jwt import (
    AccessTokenClaims,
    InvalidTokenError,
    JWTError,
    JWTManager,
    RefreshTokenClaims,
    TokenExpiredError,
    TokenPair,
)
from academy_lms.domains.auth.password import PasswordHasher
from academy_lms.domains.auth.service import (
    AuthService,
    InvalidCredentialsError,
    TokenRefreshError,
)
from academy_lms.domains.auth.session_store import SessionStore

__all__ = [
    "AccessTokenClaims",
    "AuthService",
    "CurrentUser",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "JWTError",
    "JWTManager",
    "PasswordHasher",
    "RefreshTokenClaims",
    "SessionStore",
    "TokenExpiredError",
    "TokenPair",
    "TokenRefreshError",
]
