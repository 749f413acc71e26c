# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API endpoints.

This module provides endpoints for courses of the caller's academy:
- GET / - List courses
- POST / - Create a course (admins: any instructor, teachers: themselves)
- GET /{course_id} - Get a course
- PUT /{course_id} - Update a course (admins, or the instructing teacher)
- DELETE /{course_id} - Delete a course with its lessons and materials (admin only)

Example:
    POST /api/v1/courses
    {
        "title": "Algebra I",
        "instructor_user_id": "V1StGXR8_Z5jdHi6B-myT"
    }
"""

import logging

from fastapi import APIRouter, Depends, status

from academy_lms.api.dependencies import AuthUser, get_course_service
from academy_lms.domains.course.service import CourseService
from academy_lms.models.common import MessageResponse, SuccessResponse
from academy_lms.models.course import CourseCreateRequest, CoursePatch, CourseResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=SuccessResponse[list[CourseResponse]],
    summary="List courses",
)
async def list_courses(
    current_user: AuthUser,
    service: CourseService = Depends(get_course_service),
) -> SuccessResponse[list[CourseResponse]]:
    courses = await service.list_courses(current_user)
    return SuccessResponse(data=courses)


@router.post(
    "",
    response_model=SuccessResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CourseCreateRequest,
    current_user: AuthUser,
    service: CourseService = Depends(get_course_service),
) -> SuccessResponse[CourseResponse]:
    """Create a course.

    The instructor must be an admin or teacher of the caller's academy.
    Teachers may only name themselves.
    """
    course = await service.create_course(current_user, data)
    return SuccessResponse(data=course)


@router.get(
    "/{course_id}",
    response_model=SuccessResponse[CourseResponse],
    summary="Get course",
)
async def get_course(
    course_id: str,
    current_user: AuthUser,
    service: CourseService = Depends(get_course_service),
) -> SuccessResponse[CourseResponse]:
    course = await service.get_course(current_user, course_id)
    return SuccessResponse(data=course)


@router.put(
    "/{course_id}",
    response_model=SuccessResponse[CourseResponse],
    summary="Update course",
)
async def update_course(
    course_id: str,
    data: CoursePatch,
    current_user: AuthUser,
    service: CourseService = Depends(get_course_service),
) -> SuccessResponse[CourseResponse]:
    course = await service.update_course(current_user, course_id, data)
    return SuccessResponse(data=course)


@router.delete(
    "/{course_id}",
    response_model=SuccessResponse[MessageResponse],
    summary="Delete course",
    description="Delete a course together with its lessons and materials. Requires admin role.",
)
async def delete_course(
    course_id: str,
    current_user: AuthUser,
    service: CourseService = Depends(get_course_service),
) -> SuccessResponse[MessageResponse]:
    await service.delete_course(current_user, course_id)
    return SuccessResponse(data=MessageResponse(message="Course deleted successfully"))
