# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Key-value store infrastructure.

The backend is chosen by settings.cache.backend at startup and held as
module-level state, the same way the database engine is.

Example:
    from academy_lms.infrastructure.cache import init_cache, get_cache

    await init_cache(settings)
    store = get_cache()
    await store.set("key", "value", expire_seconds=60)
"""

from typing import TYPE_CHECKING

from academy_lms.infrastructure.cache.base import CacheError, KeyValueStore
from academy_lms.infrastructure.cache.memory import MemoryKeyValueStore
from academy_lms.infrastructure.cache.redis_client import RedisClient, RedisError

if TYPE_CHECKING:
    from academy_lms.core.config.settings import Settings

_cache: RedisClient | MemoryKeyValueStore | None = None


async def init_cache(settings: "Settings") -> KeyValueStore:
    """Initialize the global key-value store.

    Args:
        settings: Application settings selecting and configuring the backend.

    Returns:
        The initialized store.

    Raises:
        RedisError: If the Redis backend cannot connect.
    """
    global _cache

    if settings.cache.backend == "memory":
        _cache = MemoryKeyValueStore()
    else:
        client = RedisClient(settings)
        await client.connect()
        _cache = client
    return _cache


async def close_cache() -> None:
    """Close the global key-value store."""
    global _cache

    if _cache is not None:
        await _cache.close()
        _cache = None


def get_cache() -> KeyValueStore:
    """Get the global key-value store.

    Raises:
        CacheError: If the store has not been initialized.
    """
    if _cache is None:
        raise CacheError("Cache not initialized. Call init_cache() first.")
    return _cache


__all__ = [
    "CacheError",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisClient",
    "RedisError",
    "init_cache",
    "close_cache",
    "get_cache",
]
