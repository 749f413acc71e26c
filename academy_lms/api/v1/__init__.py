# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Each module provides a FastAPI router for a specific domain.

Modules:
    auth: Authentication endpoints (login, refresh, logout).
    users: User management endpoints.
    courses: Course endpoints.
    lessons: Lesson endpoints, nested under courses.
    materials: Lesson material endpoints.
    bootstrap: Seeding endpoint guarded by the bootstrap token.
"""

from fastapi import APIRouter

from academy_lms.api.v1 import auth, bootstrap, courses, lessons, materials, users

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(lessons.router, prefix="/courses", tags=["Lessons"])
router.include_router(materials.router, prefix="/materials", tags=["Materials"])
router.include_router(bootstrap.router, prefix="/bootstrap", tags=["Bootstrap"])

__all__ = ["router"]
