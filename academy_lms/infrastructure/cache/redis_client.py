# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis-backed key-value store.

Holds refresh-token records. Every
redis-py failure is re-raised as RedisError so callers only handle
CacheError.

Example:
    client = RedisClient(settings)
    await client.connect()
    await client.set("refresh_token:u1", token, expire_seconds=604800)
    await client.close()
"""

from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError as BaseRedisError

from academy_lms.infrastructure.cache.base import CacheError

if TYPE_CHECKING:
    from academy_lms.core.config.settings import Settings

T = TypeVar("T")


class RedisError(CacheError):
    """Exception raised for Redis operation failures."""


class RedisClient:
    """KeyValueStore over a redis.asyncio connection pool."""

    def __init__(self, settings: "Settings") -> None:
        self._redis_settings = settings.redis
        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None

    async def connect(self) -> None:
        """Open the pool and check the server answers.

        Raises:
            RedisError: If the server is unreachable.
        """
        self._pool = ConnectionPool.from_url(
            self._redis_settings.url,
            max_connections=self._redis_settings.max_connections,
            decode_responses=True,
        )
        self._redis = Redis(connection_pool=self._pool)
        await self._run(self._redis.ping(), "Failed to connect to Redis")

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    @property
    def _client(self) -> Redis:
        if self._redis is None:
            raise RedisError("Redis client not connected. Call connect() first.")
        return self._redis

    @staticmethod
    async def _run(command: Awaitable[T], failure: str) -> T:
        try:
            return await command
        except BaseRedisError as e:
            raise RedisError(failure, e) from e

    async def get(self, key: str) -> str | None:
        return await self._run(self._client.get(key), f"Failed to get key: {key}")

    async def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        await self._run(
            self._client.set(key, value, ex=expire_seconds),
            f"Failed to set key: {key}",
        )

    async def delete(self, key: str) -> bool:
        """Delete key, returning False when it was already absent."""
        removed = await self._run(self._client.delete(key), f"Failed to delete key: {key}")
        return removed > 0

    async def ping(self) -> bool:
        """Return True when the server answers, False on any store failure."""
        try:
            await self._run(self._client.ping(), "Redis ping failed")
        except RedisError:
            return False
        return True
