# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course request and response models."""

from pydantic import BaseModel, ConfigDict, Field

_TITLE = {"min_length": 1, "max_length": 200}


class CourseCreateRequest(BaseModel):
    """Create a course in the caller's academy."""

    title: str = Field(**_TITLE)
    instructor_user_id: str = Field(min_length=1, description="Admin or teacher of the same academy")


class CoursePatch(BaseModel):
    """Partial update of a course."""

    title: str | None = Field(default=None, **_TITLE)
    instructor_user_id: str | None = Field(default=None, min_length=1)


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    academy_id: str
    instructor_user_id: str
