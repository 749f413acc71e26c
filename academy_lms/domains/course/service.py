# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course service.

Every operation follows the same order: fetch the target through the
tenant-scoped repository (absent means NotFound), ask the authorization
engine, validate any proposed instructor, write, commit.

Example:
    >>> service = CourseService(db)
    >>> course = await service.create_course(identity, request)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from academy_lms.core.errors import NotFoundError, ValidationError
from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.domains.authorization.engine import (
    Action,
    AuthorizationEngine,
    Resource,
    ResourceKind,
)
from academy_lms.infrastructure.database.models import Course
from academy_lms.infrastructure.database.repository import TenantRepository
from academy_lms.models.common import UserRole
from academy_lms.models.course import CourseCreateRequest, CoursePatch, CourseResponse

logger = logging.getLogger(__name__)

INSTRUCTOR_ROLES = frozenset({UserRole.ADMIN, UserRole.TEACHER})


class CourseService:
    """Service for courses within the caller's academy.

    Attributes:
        _db: Async database session.
        _repo: Tenant-scoped repository.
        _engine: Authorization engine.
    """

    def __init__(self, db: AsyncSession, engine: AuthorizationEngine | None = None) -> None:
        """Initialize the course service.

        Args:
            db: Async database session.
            engine: Authorization engine. A default one is created if omitted.
        """
        self._db = db
        self._repo = TenantRepository(db)
        self._engine = engine or AuthorizationEngine()

    async def _load(self, identity: CurrentUser, course_id: str) -> Course:
        course = await self._repo.get_course(identity.academy_id, course_id)
        if course is None:
            raise NotFoundError("Course not found")
        return course

    async def _check_instructor(self, academy_id: str, instructor_user_id: str) -> None:
        """Ensure a proposed instructor is an admin or teacher of the academy.

        Raises:
            ValidationError: If the user is missing, in another academy or a student.
        """
        instructor = await self._repo.get_user(academy_id, instructor_user_id)
        if instructor is None:
            raise ValidationError("Instructor not found or does not belong to your academy")
        if instructor.role not in INSTRUCTOR_ROLES:
            raise ValidationError("Instructor must be an admin or teacher")

    async def list_courses(self, identity: CurrentUser) -> list[CourseResponse]:
        self._engine.authorize(identity, Action.LIST, ResourceKind.COURSE).enforce()
        courses = await self._repo.list_courses(identity.academy_id)
        return [CourseResponse.model_validate(c) for c in courses]

    async def get_course(self, identity: CurrentUser, course_id: str) -> CourseResponse:
        """Get a course of the caller's academy.

        Raises:
            NotFoundError: If the course does not exist in the academy.
        """
        course = await self._load(identity, course_id)
        self._engine.authorize(
            identity, Action.READ, ResourceKind.COURSE, resource=Resource.from_course(course)
        ).enforce()
        return CourseResponse.model_validate(course)

    async def create_course(
        self,
        identity: CurrentUser,
        request: CourseCreateRequest,
    ) -> CourseResponse:
        """Create a course.

        Args:
            identity: Authenticated caller.
            request: Title and instructor.

        Returns:
            Created course.

        Raises:
            AuthorizationError: If the caller's role or the chosen instructor
                is not allowed.
            ValidationError: If the instructor is not an admin or teacher of
                the academy.
        """
        self._engine.authorize(identity, Action.CREATE, ResourceKind.COURSE, patch=request).enforce()
        await self._check_instructor(identity.academy_id, request.instructor_user_id)

        course = await self._repo.create_course(
            academy_id=identity.academy_id,
            title=request.title,
            instructor_user_id=request.instructor_user_id,
        )
        await self._db.commit()

        logger.info(
            "Course created: id=%s, academy=%s, instructor=%s, by=%s",
            course.id,
            course.academy_id,
            course.instructor_user_id,
            identity.id,
        )
        return CourseResponse.model_validate(course)

    async def update_course(
        self,
        identity: CurrentUser,
        course_id: str,
        patch: CoursePatch,
    ) -> CourseResponse:
        """Update a course.

        Ownership is judged on the course as stored, before the patch.

        Raises:
            NotFoundError: If the course does not exist in the academy.
            AuthorizationError: If the caller may not update it.
            ValidationError: If a new instructor is not eligible.
        """
        course = await self._load(identity, course_id)
        allowed = self._engine.authorize(
            identity,
            Action.UPDATE,
            ResourceKind.COURSE,
            resource=Resource.from_course(course),
            patch=patch,
        ).enforce()

        if allowed.instructor_user_id is not None:
            await self._check_instructor(identity.academy_id, allowed.instructor_user_id)

        updated = await self._repo.update_course(identity.academy_id, course_id, allowed)
        if updated is None:
            raise NotFoundError("Course not found")
        await self._db.commit()

        logger.info("Course updated: id=%s, by=%s", course_id, identity.id)
        return CourseResponse.model_validate(updated)

    async def delete_course(self, identity: CurrentUser, course_id: str) -> None:
        """Delete a course with its lessons and materials.

        Raises:
            NotFoundError: If the course does not exist in the academy.
            AuthorizationError: If the caller is not an admin.
        """
        course = await self._load(identity, course_id)
        self._engine.authorize(
            identity, Action.DELETE, ResourceKind.COURSE, resource=Resource.from_course(course)
        ).enforce()

        if not await self._repo.delete_course(identity.academy_id, course_id):
            raise NotFoundError("Course not found")
        await self._db.commit()

        logger.info("Course deleted: id=%s, by=%s", course_id, identity.id)
