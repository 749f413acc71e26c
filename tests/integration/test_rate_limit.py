# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the rate limit middleware."""

from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from limits.aio.storage import MemoryStorage, RedisStorage, Storage
from limits.aio.storage import memory as memory_storage_module
from limits.errors import StorageError
from pydantic import SecretStr
from redis.exceptions import ConnectionError as RedisConnectionError

from academy_lms.api.middleware import rate_limit as rate_limit_module
from academy_lms.api.middleware.rate_limit import RateLimitMiddleware, build_rate_limit_storage
from academy_lms.core.config import CacheSettings, RateLimitSettings, SecuritySettings, Settings

PARTNER_KEY = "partner-key"


class FlakyStorage(MemoryStorage):
    """Memory storage whose first ``failures`` increments raise StorageError."""

    def __init__(self, failures: int) -> None:
        super().__init__(wrap_exceptions=True)
        self.failures = failures

    async def incr(self, key: str, expiry: float, amount: int = 1) -> int:
        if self.failures > 0:
            self.failures -= 1
            raise StorageError(RedisConnectionError("connection reset"))
        return await super().incr(key, expiry, amount=amount)


class ManualClock:
    def __init__(self) -> None:
        self.now = 1_700_000_000.0

    def time(self) -> float:
        return self.now


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> ManualClock:
    """Drive the counter windows from a manual clock."""
    manual = ManualClock()
    fake_time = SimpleNamespace(time=manual.time)
    monkeypatch.setattr(memory_storage_module, "time", fake_time)
    monkeypatch.setattr(rate_limit_module, "time", fake_time)
    return manual


@pytest.fixture
def limited_settings(settings: Settings) -> Settings:
    """Settings with small limits so tests can exhaust them."""
    return settings.model_copy(
        update={
            "rate_limit": RateLimitSettings(
                enabled=True,
                ip_requests=3,
                ip_window_seconds=60,
                api_key_requests=2,
                api_key_window_seconds=86400,
            ),
            "security": SecuritySettings(api_key=SecretStr(PARTNER_KEY), bcrypt_rounds=4),
        }
    )


def _build_app(settings: Settings, storage: Storage | None = None) -> FastAPI:
    app = FastAPI()
    app.add_middleware(
        RateLimitMiddleware,
        settings=settings,
        storage=storage if storage is not None else MemoryStorage(wrap_exceptions=True),
    )

    @app.get("/api/v1/ping")
    async def ping() -> dict:
        return {"ok": True}

    @app.get("/health")
    async def health() -> dict:
        return {"ok": True}

    return app


class TestRateLimitMiddleware:
    """Tests for RateLimitMiddleware."""

    def test_ip_limit(self, limited_settings: Settings) -> None:
        """Test that the fourth request in the window is refused."""
        with TestClient(_build_app(limited_settings)) as client:
            statuses = [client.get("/api/v1/ping").status_code for _ in range(4)]
            refused = client.get("/api/v1/ping")

        assert statuses == [200, 200, 200, 429]
        assert refused.status_code == 429
        assert 1 <= int(refused.headers["Retry-After"]) <= 60
        assert refused.json()["success"] is False
        assert refused.json()["code"] == "rate_limited"
        assert "Maximum 3 requests per 60 seconds" in refused.json()["error"]

    def test_window_resets(self, limited_settings: Settings, clock: ManualClock) -> None:
        """Test that a refused address is served again once its window ends."""
        with TestClient(_build_app(limited_settings)) as client:
            first_window = [client.get("/api/v1/ping").status_code for _ in range(4)]
            clock.now += 30
            refused = client.get("/api/v1/ping")
            clock.now += 31
            next_window = [client.get("/api/v1/ping").status_code for _ in range(4)]

        assert first_window == [200, 200, 200, 429]
        assert refused.status_code == 429
        assert refused.headers["Retry-After"] == "30"
        assert next_window == [200, 200, 200, 429]

    def test_window_expires_after_storage_failure(
        self,
        limited_settings: Settings,
        clock: ManualClock,
    ) -> None:
        """Test that a failed hit never leaves a counter without an expiry."""
        with TestClient(_build_app(limited_settings, FlakyStorage(failures=1))) as client:
            first_window = [client.get("/api/v1/ping").status_code for _ in range(5)]
            clock.now += 3600
            hour_later = [client.get("/api/v1/ping").status_code for _ in range(3)]

        assert first_window == [200, 200, 200, 200, 429]
        assert hour_later == [200, 200, 200]

    def test_addresses_counted_separately(self, limited_settings: Settings) -> None:
        with TestClient(_build_app(limited_settings)) as client:
            for _ in range(3):
                client.get("/api/v1/ping", headers={"CF-Connecting-IP": "10.0.0.1"})
            first = client.get("/api/v1/ping", headers={"CF-Connecting-IP": "10.0.0.1"})
            second = client.get("/api/v1/ping", headers={"CF-Connecting-IP": "10.0.0.2"})
            socket_peer = client.get("/api/v1/ping")

        assert first.status_code == 429
        assert second.status_code == 200
        assert socket_peer.status_code == 200

    def test_forwarded_for_header_is_not_trusted(self, limited_settings: Settings) -> None:
        """Test that rotating X-Forwarded-For does not escape the address limit."""
        with TestClient(_build_app(limited_settings)) as client:
            statuses = [
                client.get(
                    "/api/v1/ping", headers={"X-Forwarded-For": f"1.2.3.{i}"}
                ).status_code
                for i in range(5)
            ]

        assert statuses == [200, 200, 200, 429, 429]

    def test_api_key_limit(self, limited_settings: Settings) -> None:
        """Test that the configured partner key has its own daily budget."""
        headers = {"X-API-Key": PARTNER_KEY}

        with TestClient(_build_app(limited_settings)) as client:
            ok = [
                client.get(
                    "/api/v1/ping", headers={**headers, "CF-Connecting-IP": f"10.0.1.{i}"}
                ).status_code
                for i in range(2)
            ]
            refused = client.get(
                "/api/v1/ping", headers={**headers, "CF-Connecting-IP": "10.0.1.9"}
            )

        assert ok == [200, 200]
        assert refused.status_code == 429
        assert 86000 < int(refused.headers["Retry-After"]) <= 86400
        assert "API key rate limit exceeded" in refused.json()["error"]

    def test_unknown_api_key_not_counted(self, limited_settings: Settings) -> None:
        with TestClient(_build_app(limited_settings)) as client:
            statuses = [
                client.get(
                    "/api/v1/ping",
                    headers={"X-API-Key": "someone-else", "CF-Connecting-IP": f"10.0.2.{i}"},
                ).status_code
                for i in range(3)
            ]

        assert statuses == [200, 200, 200]

    def test_health_is_exempt(self, limited_settings: Settings) -> None:
        with TestClient(_build_app(limited_settings)) as client:
            statuses = [client.get("/health").status_code for _ in range(5)]

        assert statuses == [200] * 5

    def test_storage_failure_lets_requests_through(self, limited_settings: Settings) -> None:
        """Test that an unavailable counter storage does not block traffic."""
        storage = FlakyStorage(failures=100)

        with TestClient(_build_app(limited_settings, storage)) as client:
            statuses = [client.get("/api/v1/ping").status_code for _ in range(5)]

        assert statuses == [200] * 5

    def test_disabled(self, settings: Settings) -> None:
        with TestClient(_build_app(settings)) as client:
            statuses = [client.get("/api/v1/ping").status_code for _ in range(10)]

        assert statuses == [200] * 10


class TestBuildRateLimitStorage:
    def test_memory_backend(self, settings: Settings) -> None:
        storage = build_rate_limit_storage(settings)

        assert isinstance(storage, MemoryStorage)
        assert storage.wrap_exceptions is True

    def test_redis_backend(self, settings: Settings) -> None:
        """Test that the redis backend counts in the configured Redis server."""
        redis_settings = settings.model_copy(update={"cache": CacheSettings(backend="redis")})

        storage = build_rate_limit_storage(redis_settings)

        assert isinstance(storage, RedisStorage)
        assert storage.wrap_exceptions is True
