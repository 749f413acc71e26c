# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-process key-value store.

Used for tests and single-process development. Expiry is evaluated lazily
on access against an injectable clock.
"""

import time
from collections.abc import Callable


class MemoryKeyValueStore:
    """Dictionary-backed KeyValueStore with TTL support.

    Example:
        store = MemoryKeyValueStore()
        await store.set("k", "v", expire_seconds=10)
        assert await store.get("k") == "v"
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        """Initialize the store.

        Args:
            clock: Returns the current time in seconds. Defaults to time.monotonic.
        """
        self._clock = clock or time.monotonic
        self._values: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}

    def _purge_if_expired(self, key: str) -> None:
        deadline = self._expires_at.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._values.pop(key, None)
            self._expires_at.pop(key, None)

    async def get(self, key: str) -> str | None:
        self._purge_if_expired(key)
        return self._values.get(key)

    async def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        self._values[key] = value
        if expire_seconds is None:
            self._expires_at.pop(key, None)
        else:
            self._expires_at[key] = self._clock() + expire_seconds

    async def delete(self, key: str) -> bool:
        self._purge_if_expired(key)
        self._expires_at.pop(key, None)
        return self._values.pop(key, None) is not None

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._values.clear()
        self._expires_at.clear()
