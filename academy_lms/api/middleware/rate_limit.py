# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixed-window rate limiting middleware.

Two limits are applied before authentication:
- per client address: 60 requests per 60 seconds
- per partner API key: 1000 requests per day, only when the X-API-Key
  header carries the configured key

Counting is done by the fixed-window strategy from ``limits``, the
library slowapi builds on. Each hit increments the counter and starts its
window in one storage operation, so a window always expires. Counters
live in Redis, or in process memory when the memory cache backend is
selected. When the storage is unavailable requests are let through and a
warning is logged.

Example:
    app.add_middleware(RateLimitMiddleware, settings=settings)
"""

import hmac
import logging
import math
import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from limits import RateLimitItem, RateLimitItemPerSecond
from limits.aio.storage import MemoryStorage, RedisStorage, Storage
from limits.aio.strategies import FixedWindowRateLimiter
from limits.errors import StorageError
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from academy_lms.core.config.settings import Settings
from academy_lms.core.errors import RateLimitedError
from academy_lms.models.common import ErrorResponse

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
RATE_LIMIT_NAMESPACE = "rate_limit"

# Paths that are never counted
EXEMPT_PATHS = frozenset({
    "/",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
})


def get_client_ip(request: Request) -> str:
    """Resolve the client address.

    Prefers the address set by the CDN edge (CF-Connecting-IP), then the
    socket peer. X-Forwarded-For is not read here: behind a trusted proxy
    uvicorn's proxy header handling (FORWARDED_ALLOW_IPS) already rewrites
    the socket peer from it.

    Args:
        request: HTTP request.

    Returns:
        Client address string.
    """
    cf_ip = request.headers.get("CF-Connecting-IP")
    if cf_ip:
        return cf_ip.strip()

    return get_remote_address(request)


def build_rate_limit_storage(settings: Settings) -> Storage:
    """Create the counter storage for the configured cache backend.

    Storage failures are raised as ``limits.errors.StorageError``.
    """
    if settings.cache.backend == "memory":
        return MemoryStorage(wrap_exceptions=True)
    return RedisStorage(
        f"async+{settings.redis.url}",
        wrap_exceptions=True,
        implementation="redispy",
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-address and per-API-key fixed-window limiter.

    Attributes:
        _limits: Rate limit settings.
        _limiter: Fixed-window strategy over the counter storage.
        _ip_limit: Limit applied to each client address.
        _api_key_limit: Limit applied to the configured partner key.
    """

    def __init__(
        self,
        app: ASGIApp,
        settings: Settings,
        storage: Storage | None = None,
    ) -> None:
        """Initialize the rate limit middleware.

        Args:
            app: ASGI application.
            settings: Application settings.
            storage: Counter storage to use instead of one built from settings.
        """
        super().__init__(app)
        self._limits = settings.rate_limit
        api_key = settings.security.api_key
        self._api_key = api_key.get_secret_value() if api_key is not None else None
        if storage is None:
            storage = build_rate_limit_storage(settings)
        self._limiter = FixedWindowRateLimiter(storage)
        self._ip_limit = RateLimitItemPerSecond(
            self._limits.ip_requests,
            self._limits.ip_window_seconds,
            namespace=RATE_LIMIT_NAMESPACE,
        )
        self._api_key_limit = RateLimitItemPerSecond(
            self._limits.api_key_requests,
            self._limits.api_key_window_seconds,
            namespace=RATE_LIMIT_NAMESPACE,
        )

    def _is_configured_api_key(self, candidate: str) -> bool:
        if not self._api_key:
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), self._api_key.encode("utf-8"))

    async def _retry_after(self, limit: RateLimitItem, *identifiers: str) -> int:
        stats = await self._limiter.get_window_stats(limit, *identifiers)
        return max(1, math.ceil(stats.reset_time - time.time()))

    async def _check(self, request: Request) -> tuple[RateLimitedError, int] | None:
        ip = get_client_ip(request)
        if not await self._limiter.hit(self._ip_limit, "ip", ip):
            logger.warning("Rate limit exceeded for ip: %s", ip)
            error = RateLimitedError(
                f"Rate limit exceeded. Maximum {self._limits.ip_requests} requests "
                f"per {self._limits.ip_window_seconds} seconds."
            )
            return error, await self._retry_after(self._ip_limit, "ip", ip)

        api_key = request.headers.get(API_KEY_HEADER)
        if api_key and self._is_configured_api_key(api_key):
            if not await self._limiter.hit(self._api_key_limit, "api", api_key):
                logger.warning("Rate limit exceeded for API key")
                error = RateLimitedError(
                    f"API key rate limit exceeded. Maximum {self._limits.api_key_requests} "
                    f"requests per {self._limits.api_key_window_seconds} seconds."
                )
                return error, await self._retry_after(self._api_key_limit, "api", api_key)

        return None

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Apply the limits, answering 429 when one is exceeded.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler.

        Returns:
            HTTP response.
        """
        if not self._limits.enabled or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        try:
            rejection = await self._check(request)
        except StorageError as e:
            logger.warning(
                "Rate limit storage unavailable, allowing request: %s",
                str(e.storage_error),
            )
            rejection = None

        if rejection is not None:
            error, retry_after = rejection
            body = ErrorResponse(error=error.message, code=error.error_code)
            return JSONResponse(
                status_code=error.status_code,
                content=body.model_dump(),
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
