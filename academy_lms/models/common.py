# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums and response envelopes.

Every API response is wrapped in an envelope:
    success: {"success": true, "data": ...}
    failure: {"success": false, "error": "...", "code": "..."}
"""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class UserRole(str, Enum):
    """Closed set of roles a user can hold within an academy."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class LessonStatus(str, Enum):
    """Publication state of a lesson."""

    DRAFT = "draft"
    PUBLISHED = "published"


class SuccessResponse(BaseModel, Generic[T]):
    """Envelope for successful responses."""

    success: bool = True
    data: T


class ErrorResponse(BaseModel):
    """Envelope for failed responses."""

    success: bool = False
    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Stable machine-readable error code")


class MessageResponse(BaseModel):
    """Payload for operations that only report an outcome."""

    message: str
