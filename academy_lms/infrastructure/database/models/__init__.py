# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models."""

from academy_lms.infrastructure.database.models.academy import (
    Academy,
    Course,
    Lesson,
    Material,
    User,
)
from academy_lms.infrastructure.database.models.base import Base, TimestampMixin, generate_id

__all__ = [
    "Base",
    "TimestampMixin",
    "generate_id",
    "Academy",
    "User",
    "Course",
    "Lesson",
    "Material",
]
