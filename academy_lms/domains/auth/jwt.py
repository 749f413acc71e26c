# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

This module provides JWT token creation and validation using python-jose.
Access tokens carry the identity claims every request needs (user id,
email, role, academy). Refresh tokens carry only the subject and are also
recorded in the session store so they can be revoked.

Expiry is checked against the manager's clock rather than the wall clock
inside python-jose, so tests can move time forward deterministically.

Example:
    >>> from academy_lms.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> pair = jwt_manager.create_token_pair(
    ...     user_id="u1", email="a@b.co", role=UserRole.ADMIN, academy_id="ac1"
    ... )
    >>> claims = jwt_manager.decode_access_token(pair.access_token)
"""

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Literal, cast

from jose import JWTError as JoseJWTError
from jose import jwt
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from academy_lms.core.config.settings import JWTSettings
from academy_lms.models.common import UserRole
from academy_lms.utils.datetime import utc_now

logger = logging.getLogger(__name__)

TokenType = Literal["access", "refresh"]


class TokenPayload(BaseModel):
    """Claims common to both token types.

    Attributes:
        sub: Subject (user ID).
        type: Token type (access or refresh).
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: Unique token ID.
    """

    sub: str
    type: TokenType
    exp: int
    iat: int
    jti: str


class AccessTokenClaims(TokenPayload):
    """Claims of an access token.

    Attributes:
        email: User email at issue time.
        role: User role at issue time.
        academy_id: Academy the user belongs to.
    """

    type: Literal["access"] = "access"
    email: str
    role: UserRole
    academy_id: str


class RefreshTokenClaims(TokenPayload):
    """Claims of a refresh token. Identity is re-read from the database."""

    type: Literal["refresh"] = "refresh"


class TokenPair(BaseModel):
    """Access and refresh token pair.

    Attributes:
        access_token: JWT access token string.
        refresh_token: JWT refresh token string.
        token_type: Token type (always "Bearer").
        expires_in: Access token expiration in seconds.
        refresh_expires_in: Refresh token expiration in seconds.
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_in: int


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is malformed, badly signed, of the wrong type or expired."""

    pass


class TokenExpiredError(InvalidTokenError):
    """Raised when a token has expired."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.
        _clock: Returns the current UTC time.

    Example:
        >>> jwt_manager = JWTManager(settings)
        >>> access = jwt_manager.create_access_token(
        ...     user_id="u1", email="t@x.io", role=UserRole.TEACHER, academy_id="ac1"
        ... )
        >>> jwt_manager.verify_token(access, "access")
        True
    """

    def __init__(
        self,
        settings: JWTSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
            clock: Source of the current time. Defaults to utc_now.
        """
        self._settings = settings
        self._clock = clock or utc_now

    @property
    def access_token_ttl_seconds(self) -> int:
        return self._settings.access_token_expire_minutes * 60

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self._settings.refresh_token_ttl_seconds

    def _encode(self, payload: dict[str, Any]) -> str:
        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def _base_claims(self, user_id: str, token_type: TokenType, lifetime: timedelta) -> dict[str, Any]:
        now = self._clock()
        return {
            "sub": str(user_id),
            "type": token_type,
            "iat": int(now.timestamp()),
            "exp": int((now + lifetime).timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

    def create_access_token(
        self,
        user_id: str,
        email: str,
        role: UserRole | str,
        academy_id: str,
    ) -> str:
        """Create an access token.

        Args:
            user_id: User identifier.
            email: User email.
            role: User role.
            academy_id: Academy the user belongs to.

        Returns:
            JWT access token string.
        """
        payload = self._base_claims(
            user_id,
            "access",
            timedelta(minutes=self._settings.access_token_expire_minutes),
        )
        payload.update(
            {
                "email": email,
                "role": UserRole(role).value,
                "academy_id": str(academy_id),
            }
        )
        return self._encode(payload)

    def create_refresh_token(self, user_id: str) -> str:
        """Create a refresh token.

        Args:
            user_id: User identifier.

        Returns:
            JWT refresh token string.
        """
        payload = self._base_claims(
            user_id,
            "refresh",
            timedelta(days=self._settings.refresh_token_expire_days),
        )
        return self._encode(payload)

    def create_token_pair(
        self,
        user_id: str,
        email: str,
        role: UserRole | str,
        academy_id: str,
    ) -> TokenPair:
        """Create an access and refresh token pair.

        Args:
            user_id: User identifier.
            email: User email.
            role: User role.
            academy_id: Academy the user belongs to.

        Returns:
            TokenPair with access and refresh tokens.
        """
        return TokenPair(
            access_token=self.create_access_token(user_id, email, role, academy_id),
            refresh_token=self.create_refresh_token(user_id),
            token_type="Bearer",
            expires_in=self.access_token_ttl_seconds,
            refresh_expires_in=self.refresh_token_ttl_seconds,
        )

    def decode_token(
        self,
        token: str,
        expected_type: TokenType | None = None,
    ) -> AccessTokenClaims | RefreshTokenClaims:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.
            expected_type: Expected token type (access or refresh).

        Returns:
            Decoded claims of the matching type.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or of the wrong type.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
                options={"verify_exp": False},
            )
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {e}") from e

        token_type = payload.get("type")
        if expected_type and token_type != expected_type:
            raise InvalidTokenError(f"Expected {expected_type} token, got {token_type}")

        try:
            if token_type == "access":
                claims: AccessTokenClaims | RefreshTokenClaims = AccessTokenClaims.model_validate(payload)
            elif token_type == "refresh":
                claims = RefreshTokenClaims.model_validate(payload)
            else:
                raise InvalidTokenError(f"Unknown token type: {token_type}")
        except PydanticValidationError as e:
            logger.warning("Token payload rejected: %s", str(e))
            raise InvalidTokenError("Invalid token payload") from e

        if claims.exp <= int(self._clock().timestamp()):
            raise TokenExpiredError("Token has expired")

        return claims

    def decode_access_token(self, token: str) -> AccessTokenClaims:
        """Decode a token that must be an access token.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or not an access token.
        """
        return cast(AccessTokenClaims, self.decode_token(token, "access"))

    def decode_refresh_token(self, token: str) -> RefreshTokenClaims:
        """Decode a token that must be a refresh token.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or not a refresh token.
        """
        return cast(RefreshTokenClaims, self.decode_token(token, "refresh"))

    def verify_token(
        self,
        token: str,
        expected_type: TokenType | None = None,
    ) -> bool:
        """Verify if a token is valid.

        Args:
            token: JWT token string.
            expected_type: Expected token type (access or refresh).

        Returns:
            True if token is valid, False otherwise.
        """
        try:
            self.decode_token(token, expected_type)
            return True
        except InvalidTokenError:
            return False
