# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request/response models for the API."""

from academy_lms.models.common import (
    ErrorResponse,
    LessonStatus,
    MessageResponse,
    SuccessResponse,
    UserRole,
)

__all__ = [
    "UserRole",
    "LessonStatus",
    "SuccessResponse",
    "ErrorResponse",
    "MessageResponse",
]
