# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Server-side record of each user's current refresh token.

One entry per user under ``refresh_token:{user_id}``. Storing a new token
replaces the previous one, so a user has at most one refresh token that
the refresh endpoint will honour. Entries expire with the token.

Example:
    store = SessionStore(get_cache(), ttl_seconds=7 * 24 * 3600)
    await store.put(user.id, pair.refresh_token)
    assert await store.matches(user.id, pair.refresh_token)
"""

import hmac
import logging

from academy_lms.infrastructure.cache.base import KeyValueStore

logger = logging.getLogger(__name__)

REFRESH_TOKEN_KEY_PREFIX = "refresh_token"


class SessionStore:
    """Maps user id to the currently valid refresh token.

    Backend failures surface as CacheError.

    Attributes:
        _store: Underlying key-value store.
        _ttl_seconds: Default entry lifetime.
    """

    def __init__(self, store: KeyValueStore, ttl_seconds: int) -> None:
        """Initialize the session store.

        Args:
            store: Key-value backend (Redis or in-memory).
            ttl_seconds: Default lifetime of an entry, normally the refresh
                token lifetime.
        """
        self._store = store
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def key_for(user_id: str) -> str:
        return f"{REFRESH_TOKEN_KEY_PREFIX}:{user_id}"

    async def put(self, user_id: str, refresh_token: str, ttl_seconds: int | None = None) -> None:
        """Record refresh_token as the user's only valid refresh token."""
        await self._store.set(
            self.key_for(user_id),
            refresh_token,
            expire_seconds=ttl_seconds or self._ttl_seconds,
        )
        logger.debug("Refresh token stored for user: %s", user_id)

    async def get(self, user_id: str) -> str | None:
        return await self._store.get(self.key_for(user_id))

    async def delete(self, user_id: str) -> bool:
        deleted = await self._store.delete(self.key_for(user_id))
        if deleted:
            logger.debug("Refresh token revoked for user: %s", user_id)
        return deleted

    async def matches(self, user_id: str, refresh_token: str) -> bool:
        """Check that refresh_token is exactly the one stored for the user."""
        stored = await self.get(user_id)
        if stored is None:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), refresh_token.encode("utf-8"))
