# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

Unauthenticated and exempt from rate limiting.
"""

from typing import Any

from fastapi import APIRouter, Request

from academy_lms.infrastructure.cache import get_cache
from academy_lms.infrastructure.cache.base import CacheError
from academy_lms.infrastructure.database.connection import check_database_connection
from academy_lms.models.common import SuccessResponse

router = APIRouter(tags=["Health"])


@router.get("/", response_model=SuccessResponse[dict[str, Any]])
async def root(request: Request) -> SuccessResponse[dict[str, Any]]:
    """Service banner."""
    return SuccessResponse(
        data={
            "name": request.app.title,
            "version": request.app.version,
            "status": "ok",
        }
    )


@router.get("/health", response_model=SuccessResponse[dict[str, Any]])
async def health() -> SuccessResponse[dict[str, Any]]:
    """Report whether the database and key-value store are reachable."""
    database_ok = await check_database_connection()
    try:
        cache_ok = await get_cache().ping()
    except CacheError:
        cache_ok = False

    return SuccessResponse(
        data={
            "status": "healthy" if database_ok and cache_ok else "degraded",
            "database": database_ok,
            "cache": cache_ok,
        }
    )
