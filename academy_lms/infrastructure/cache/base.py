# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Key-value store contract shared by the Redis and in-memory backends.

The session store only needs string values with an optional time-to-live,
so the contract is kept to get, set and delete.
"""

from typing import Protocol, runtime_checkable


class CacheError(Exception):
    """Exception raised for key-value store failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying backend error.
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """Initialize the cache error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal async key-value store with per-key TTLs."""

    async def get(self, key: str) -> str | None:
        """Return the value stored under key, or None when absent or expired."""
        ...

    async def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        """Store value under key, replacing any previous value and TTL."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key. Returns True when something was deleted."""
        ...
