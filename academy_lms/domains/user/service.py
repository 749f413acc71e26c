# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service for academy membership management.

This module provides the UserService that handles:
- Listing, reading, creating, updating and deleting users of an academy
- Out-of-band bootstrap of an academy's first users

Emails are unique across all academies. A user who instructs any course
cannot be deleted until the courses are reassigned or removed.

Example:
    >>> service = UserService(db, PasswordHasher(), session_store=store)
    >>> user = await service.create_user(admin, UserCreateRequest(...))
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from academy_lms.core.errors import (
    ConflictError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.domains.auth.password import PasswordHasher
from academy_lms.domains.auth.session_store import SessionStore
from academy_lms.domains.authorization.engine import (
    Action,
    AuthorizationEngine,
    Resource,
    ResourceKind,
)
from academy_lms.infrastructure.cache.base import CacheError
from academy_lms.infrastructure.database.models import User
from academy_lms.infrastructure.database.repository import TenantRepository
from academy_lms.models.user import (
    BootstrapUserRequest,
    UserCreateRequest,
    UserPatch,
    UserResponse,
)

logger = logging.getLogger(__name__)


class UserService:
    """Service for users within the caller's academy.

    Attributes:
        _db: Async database session.
        _repo: Tenant-scoped repository.
        _hasher: Password hasher.
        _engine: Authorization engine.
        _sessions: Refresh token store, used to revoke deleted users.
    """

    def __init__(
        self,
        db: AsyncSession,
        password_hasher: PasswordHasher,
        engine: AuthorizationEngine | None = None,
        session_store: SessionStore | None = None,
    ) -> None:
        """Initialize the user service.

        Args:
            db: Async database session.
            password_hasher: Hasher for new and changed passwords.
            engine: Authorization engine. A default one is created if omitted.
            session_store: Refresh token store. When given, deleting a user
                also revokes their session.
        """
        self._db = db
        self._repo = TenantRepository(db)
        self._hasher = password_hasher
        self._engine = engine or AuthorizationEngine()
        self._sessions = session_store

    def _hash(self, password: str) -> str:
        try:
            return self._hasher.hash(password)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    async def _load(self, identity: CurrentUser, user_id: str) -> User:
        user = await self._repo.get_user(identity.academy_id, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _ensure_email_free(self, email: str, message: str) -> None:
        if await self._repo.get_user_by_email_global(email) is not None:
            raise ConflictError(message)

    async def list_users(self, identity: CurrentUser) -> list[UserResponse]:
        """List the users of the caller's academy.

        Raises:
            AuthorizationError: If the caller is not an admin.
        """
        self._engine.authorize(identity, Action.LIST, ResourceKind.USER).enforce()
        users = await self._repo.list_users(identity.academy_id)
        return [UserResponse.model_validate(u) for u in users]

    async def get_user(self, identity: CurrentUser, user_id: str) -> UserResponse:
        """Get a user of the caller's academy.

        Raises:
            NotFoundError: If the user does not exist in the academy.
            AuthorizationError: If a non-admin asks for someone else.
        """
        user = await self._load(identity, user_id)
        self._engine.authorize(
            identity, Action.READ, ResourceKind.USER, resource=Resource.from_user(user)
        ).enforce()
        return UserResponse.model_validate(user)

    async def create_user(self, identity: CurrentUser, request: UserCreateRequest) -> UserResponse:
        """Add a user to the caller's academy.

        Raises:
            AuthorizationError: If the caller is not an admin.
            ConflictError: If the email is already registered.
        """
        self._engine.authorize(identity, Action.CREATE, ResourceKind.USER, patch=request).enforce()
        await self._ensure_email_free(request.email, "User with this email already exists")

        user = await self._repo.create_user(
            academy_id=identity.academy_id,
            email=request.email,
            password_hash=self._hash(request.password),
            role=request.role,
        )
        await self._db.commit()

        logger.info(
            "User created: id=%s, role=%s, academy=%s, by=%s",
            user.id,
            user.role.value,
            user.academy_id,
            identity.id,
        )
        return UserResponse.model_validate(user)

    async def update_user(
        self,
        identity: CurrentUser,
        user_id: str,
        patch: UserPatch,
    ) -> UserResponse:
        """Update a user's email, password or role.

        Non-admins may only update themselves and may not change their role.
        A role equal to the current one is ignored.

        Raises:
            NotFoundError: If the user does not exist in the academy.
            AuthorizationError: If the change is not allowed.
            ConflictError: If the new email belongs to another user.
        """
        user = await self._load(identity, user_id)
        allowed = self._engine.authorize(
            identity,
            Action.UPDATE,
            ResourceKind.USER,
            resource=Resource.from_user(user),
            patch=patch,
        ).enforce()

        if allowed.email is not None and allowed.email != user.email:
            await self._ensure_email_free(allowed.email, "Email already taken by another user")

        password_hash = self._hash(allowed.password) if allowed.password is not None else None

        updated = await self._repo.update_user(
            identity.academy_id,
            user_id,
            allowed,
            password_hash=password_hash,
        )
        if updated is None:
            raise NotFoundError("User not found")
        await self._db.commit()

        logger.info("User updated: id=%s, by=%s", user_id, identity.id)
        return UserResponse.model_validate(updated)

    async def delete_user(self, identity: CurrentUser, user_id: str) -> None:
        """Delete a user and revoke their session.

        Raises:
            NotFoundError: If the user does not exist in the academy.
            AuthorizationError: If the caller is not an admin.
            ConflictError: If the user instructs at least one course.
            UnexpectedError: If the session cannot be revoked.
        """
        user = await self._load(identity, user_id)
        self._engine.authorize(
            identity, Action.DELETE, ResourceKind.USER, resource=Resource.from_user(user)
        ).enforce()

        if await self._repo.count_courses_by_instructor(identity.academy_id, user_id) > 0:
            raise ConflictError("Cannot delete user who is an instructor of existing courses")

        if self._sessions is not None:
            try:
                await self._sessions.delete(user_id)
            except CacheError as e:
                logger.error("Failed to revoke session for user %s: %s", user_id, str(e))
                raise UnexpectedError("Failed to delete user") from e

        if not await self._repo.delete_user(identity.academy_id, user_id):
            raise NotFoundError("User not found")
        await self._db.commit()

        logger.info("User deleted: id=%s, by=%s", user_id, identity.id)

    async def bootstrap_user(self, request: BootstrapUserRequest) -> UserResponse:
        """Create a user outside the normal permission checks.

        Used to seed an academy's first admin. The academy is created when
        academy_id is unknown (or omitted) and academy_name is supplied.

        Raises:
            NotFoundError: If academy_id is unknown and no academy_name is given.
            ConflictError: If the email is already registered.
        """
        academy = None
        if request.academy_id:
            academy = await self._repo.get_academy(request.academy_id)
        if academy is None:
            if not request.academy_name:
                raise NotFoundError("Academy not found")
            academy = await self._repo.create_academy(request.academy_name, request.academy_id)

        await self._ensure_email_free(request.email, "User with this email already exists")

        user = await self._repo.create_user(
            academy_id=academy.id,
            email=request.email,
            password_hash=self._hash(request.password),
            role=request.role,
        )
        await self._db.commit()

        logger.info(
            "Bootstrap user created: id=%s, role=%s, academy=%s",
            user.id,
            user.role.value,
            academy.id,
        )
        return UserResponse.model_validate(user)
