# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the in-memory key-value store."""

import pytest

from academy_lms.infrastructure.cache.base import KeyValueStore
from academy_lms.infrastructure.cache.memory import MemoryKeyValueStore


class ManualClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store(clock: ManualClock) -> MemoryKeyValueStore:
    return MemoryKeyValueStore(clock=clock)


class TestMemoryKeyValueStore:
    """Tests for MemoryKeyValueStore."""

    def test_satisfies_protocol(self, store: MemoryKeyValueStore) -> None:
        assert isinstance(store, KeyValueStore)

    async def test_set_get_delete(self, store: MemoryKeyValueStore) -> None:
        await store.set("k", "v")

        assert await store.get("k") == "v"
        assert await store.delete("k") is True
        assert await store.get("k") is None
        assert await store.delete("k") is False

    async def test_value_expires(self, store: MemoryKeyValueStore, clock: ManualClock) -> None:
        """Test that a value disappears once its lifetime passes."""
        await store.set("k", "v", expire_seconds=10)

        clock.now += 9
        assert await store.get("k") == "v"

        clock.now += 1
        assert await store.get("k") is None

    async def test_set_without_expiry_clears_previous_expiry(
        self,
        store: MemoryKeyValueStore,
        clock: ManualClock,
    ) -> None:
        await store.set("k", "v", expire_seconds=10)
        await store.set("k", "w")

        clock.now += 100
        assert await store.get("k") == "w"

