# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson API endpoints, nested under their course.

- GET /courses/{course_id}/lessons - List lessons of a course
- POST /courses/{course_id}/lessons - Create a lesson authored by the caller
- GET /courses/{course_id}/lessons/{lesson_id} - Get a lesson
- PUT /courses/{course_id}/lessons/{lesson_id} - Update a lesson
- DELETE /courses/{course_id}/lessons/{lesson_id} - Delete a lesson (admin only)
"""

from fastapi import APIRouter, Depends, status

from academy_lms.api.dependencies import AuthUser, get_lesson_service
from academy_lms.domains.lesson.service import LessonService
from academy_lms.models.common import MessageResponse, SuccessResponse
from academy_lms.models.lesson import LessonCreateRequest, LessonPatch, LessonResponse

router = APIRouter()


@router.get(
    "/{course_id}/lessons",
    response_model=SuccessResponse[list[LessonResponse]],
    summary="List lessons",
)
async def list_lessons(
    course_id: str,
    current_user: AuthUser,
    service: LessonService = Depends(get_lesson_service),
) -> SuccessResponse[list[LessonResponse]]:
    lessons = await service.list_lessons(current_user, course_id)
    return SuccessResponse(data=lessons)


@router.post(
    "/{course_id}/lessons",
    response_model=SuccessResponse[LessonResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create lesson",
)
async def create_lesson(
    course_id: str,
    data: LessonCreateRequest,
    current_user: AuthUser,
    service: LessonService = Depends(get_lesson_service),
) -> SuccessResponse[LessonResponse]:
    lesson = await service.create_lesson(current_user, course_id, data)
    return SuccessResponse(data=lesson)


@router.get(
    "/{course_id}/lessons/{lesson_id}",
    response_model=SuccessResponse[LessonResponse],
    summary="Get lesson",
)
async def get_lesson(
    course_id: str,
    lesson_id: str,
    current_user: AuthUser,
    service: LessonService = Depends(get_lesson_service),
) -> SuccessResponse[LessonResponse]:
    lesson = await service.get_lesson(current_user, course_id, lesson_id)
    return SuccessResponse(data=lesson)


@router.put(
    "/{course_id}/lessons/{lesson_id}",
    response_model=SuccessResponse[LessonResponse],
    summary="Update lesson",
)
async def update_lesson(
    course_id: str,
    lesson_id: str,
    data: LessonPatch,
    current_user: AuthUser,
    service: LessonService = Depends(get_lesson_service),
) -> SuccessResponse[LessonResponse]:
    lesson = await service.update_lesson(current_user, course_id, lesson_id, data)
    return SuccessResponse(data=lesson)


@router.delete(
    "/{course_id}/lessons/{lesson_id}",
    response_model=SuccessResponse[MessageResponse],
    summary="Delete lesson",
)
async def delete_lesson(
    course_id: str,
    lesson_id: str,
    current_user: AuthUser,
    service: LessonService = Depends(get_lesson_service),
) -> SuccessResponse[MessageResponse]:
    await service.delete_lesson(current_user, course_id, lesson_id)
    return SuccessResponse(data=MessageResponse(message="Lesson deleted successfully"))
