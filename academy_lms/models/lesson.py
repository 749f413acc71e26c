# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson request and response models."""

from pydantic import BaseModel, ConfigDict, Field

from academy_lms.models.common import LessonStatus


class LessonCreateRequest(BaseModel):
    """Create a lesson. The course comes from the URL path."""

    title: str = Field(min_length=1, max_length=200)
    status: LessonStatus = LessonStatus.DRAFT


class LessonPatch(BaseModel):
    """Partial update of a lesson. The author cannot be changed."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    status: LessonStatus | None = None


class LessonResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    status: LessonStatus
    course_id: str
    author_user_id: str
