# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for the token lifecycle.

This module provides the AuthService that orchestrates:
- Login with email and password
- Access token refresh against the stored refresh token
- Logout by revoking the stored refresh token

Refresh tokens are not rotated. A refresh returns a new access token and
leaves the stored refresh token in place until it expires, is replaced by
a new login, or is revoked by logout.

Example:
    >>> auth_service = AuthService(db, jwt_manager, session_store, hasher)
    >>> result = await auth_service.login("t@academy.io", "secret1")
    >>> fresh = await auth_service.refresh(result.refresh_token)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from academy_lms.core.errors import AuthenticationError, UnexpectedError
from academy_lms.domains.auth.jwt import InvalidTokenError, JWTManager
from academy_lms.domains.auth.password import PasswordHasher
from academy_lms.domains.auth.session_store import SessionStore
from academy_lms.infrastructure.cache.base import CacheError
from academy_lms.infrastructure.database.repository import TenantRepository
from academy_lms.models.auth import AccessTokenResponse, LoginResponse
from academy_lms.models.user import UserResponse

logger = logging.getLogger(__name__)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the email is unknown or the password is wrong."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class TokenRefreshError(AuthenticationError):
    """Raised when a refresh token cannot be exchanged for an access token."""

    def __init__(self) -> None:
        super().__init__("Invalid refresh token")


class AuthService:
    """Authentication service for login, refresh and logout.

    Attributes:
        _repo: Tenant-scoped repository (only its global user lookups are used).
        _jwt_manager: JWT token manager.
        _sessions: Refresh token store.
        _hasher: Password hasher.
    """

    def __init__(
        self,
        db: AsyncSession,
        jwt_manager: JWTManager,
        session_store: SessionStore,
        password_hasher: PasswordHasher,
    ) -> None:
        """Initialize the authentication service.

        Args:
            db: Async database session.
            jwt_manager: JWT token manager.
            session_store: Refresh token store.
            password_hasher: Password hasher used to check credentials.
        """
        self._repo = TenantRepository(db)
        self._jwt_manager = jwt_manager
        self._sessions = session_store
        self._hasher = password_hasher

    async def login(self, email: str, password: str) -> LoginResponse:
        """Authenticate with email and password and open a session.

        Any previously stored refresh token for the user is replaced.

        Args:
            email: Account email.
            password: Plain text password.

        Returns:
            Token pair and the public view of the user.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password
                does not match. Both cases look the same to the caller.
            UnexpectedError: If the session store is unavailable.
        """
        user = await self._repo.get_user_by_email_global(email)
        if user is None or not self._hasher.verify(password, user.password_hash):
            logger.info("Login failed for email: %s", email)
            raise InvalidCredentialsError()

        pair = self._jwt_manager.create_token_pair(
            user_id=user.id,
            email=user.email,
            role=user.role,
            academy_id=user.academy_id,
        )

        try:
            await self._sessions.put(user.id, pair.refresh_token, pair.refresh_expires_in)
        except CacheError as e:
            logger.error("Failed to store refresh token for user %s: %s", user.id, str(e))
            raise UnexpectedError("Login failed") from e

        logger.info("User logged in: id=%s, academy=%s", user.id, user.academy_id)

        return LoginResponse(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            token_type=pair.token_type,
            expires_in=pair.expires_in,
            user=UserResponse.model_validate(user),
        )

    async def refresh(self, refresh_token: str) -> AccessTokenResponse:
        """Mint a new access token from a refresh token.

        The token must verify, must be exactly the token stored for its
        subject, and the subject must still exist. Role and academy are
        re-read from the database so the new access token reflects changes
        made since login.

        Args:
            refresh_token: Refresh token issued at login.

        Returns:
            A new access token.

        Raises:
            TokenRefreshError: If any of the checks above fail.
            UnexpectedError: If the session store is unavailable.
        """
        try:
            claims = self._jwt_manager.decode_refresh_token(refresh_token)
        except InvalidTokenError as e:
            logger.debug("Refresh rejected: %s", str(e))
            raise TokenRefreshError() from e

        try:
            is_current = await self._sessions.matches(claims.sub, refresh_token)
        except CacheError as e:
            logger.error("Failed to read refresh token for user %s: %s", claims.sub, str(e))
            raise UnexpectedError("Token refresh failed") from e

        if not is_current:
            logger.info("Refresh token not current for user: %s", claims.sub)
            raise TokenRefreshError()

        user = await self._repo.get_user_global(claims.sub)
        if user is None:
            raise TokenRefreshError()

        access_token = self._jwt_manager.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            academy_id=user.academy_id,
        )
        logger.info("Access token refreshed for user: %s", user.id)

        return AccessTokenResponse(
            access_token=access_token,
            expires_in=self._jwt_manager.access_token_ttl_seconds,
        )

    async def logout(self, refresh_token: str) -> None:
        """Revoke the session named by a refresh token.

        A token that does not verify is ignored and nothing changes, so
        logout is always reported as successful.

        Args:
            refresh_token: The refresh token to revoke.

        Raises:
            UnexpectedError: If the session store is unavailable.
        """
        try:
            claims = self._jwt_manager.decode_refresh_token(refresh_token)
        except InvalidTokenError as e:
            logger.debug("Logout with unverifiable token ignored: %s", str(e))
            return

        try:
            await self._sessions.delete(claims.sub)
        except CacheError as e:
            logger.error("Failed to revoke refresh token for user %s: %s", claims.sub, str(e))
            raise UnexpectedError("Logout failed") from e

        logger.info("User logged out: %s", claims.sub)
