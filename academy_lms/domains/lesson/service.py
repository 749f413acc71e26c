# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson service.

Lessons are addressed through their course. A lesson id under the wrong
course, or a course outside the caller's academy, is NotFound.

The author of a lesson is the user who created it and never changes.
Teaching a course does not grant edit rights over lessons another user
wrote in it.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from academy_lms.core.errors import NotFoundError
from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.domains.authorization.engine import (
    Action,
    AuthorizationEngine,
    Resource,
    ResourceKind,
)
from academy_lms.infrastructure.database.models import Course, Lesson
from academy_lms.infrastructure.database.repository import TenantRepository
from academy_lms.models.lesson import LessonCreateRequest, LessonPatch, LessonResponse

logger = logging.getLogger(__name__)


class LessonService:
    """Service for lessons within the caller's academy.

    Attributes:
        _db: Async database session.
        _repo: Tenant-scoped repository.
        _engine: Authorization engine.
    """

    def __init__(self, db: AsyncSession, engine: AuthorizationEngine | None = None) -> None:
        self._db = db
        self._repo = TenantRepository(db)
        self._engine = engine or AuthorizationEngine()

    async def _load_course(self, identity: CurrentUser, course_id: str) -> Course:
        course = await self._repo.get_course(identity.academy_id, course_id)
        if course is None:
            raise NotFoundError("Course not found")
        return course

    async def _load(self, identity: CurrentUser, course_id: str, lesson_id: str) -> Lesson:
        await self._load_course(identity, course_id)
        lesson = await self._repo.get_lesson(identity.academy_id, lesson_id, course_id=course_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")
        return lesson

    async def list_lessons(self, identity: CurrentUser, course_id: str) -> list[LessonResponse]:
        """List the lessons of a course.

        Raises:
            NotFoundError: If the course does not exist in the academy.
        """
        course = await self._load_course(identity, course_id)
        self._engine.authorize(
            identity, Action.LIST, ResourceKind.LESSON, related=Resource.from_course(course)
        ).enforce()
        lessons = await self._repo.list_lessons(identity.academy_id, course_id)
        return [LessonResponse.model_validate(lesson) for lesson in lessons]

    async def get_lesson(
        self,
        identity: CurrentUser,
        course_id: str,
        lesson_id: str,
    ) -> LessonResponse:
        lesson = await self._load(identity, course_id, lesson_id)
        self._engine.authorize(
            identity,
            Action.READ,
            ResourceKind.LESSON,
            resource=Resource.from_lesson(lesson, identity.academy_id),
        ).enforce()
        return LessonResponse.model_validate(lesson)

    async def create_lesson(
        self,
        identity: CurrentUser,
        course_id: str,
        request: LessonCreateRequest,
    ) -> LessonResponse:
        """Create a lesson authored by the caller.

        Raises:
            NotFoundError: If the course does not exist in the academy.
            AuthorizationError: If the caller may not add lessons to it.
        """
        course = await self._load_course(identity, course_id)
        self._engine.authorize(
            identity,
            Action.CREATE,
            ResourceKind.LESSON,
            patch=request,
            related=Resource.from_course(course),
        ).enforce()

        lesson = await self._repo.create_lesson(
            academy_id=identity.academy_id,
            course_id=course_id,
            title=request.title,
            status=request.status,
            author_user_id=identity.id,
        )
        await self._db.commit()

        logger.info(
            "Lesson created: id=%s, course=%s, author=%s",
            lesson.id,
            course_id,
            identity.id,
        )
        return LessonResponse.model_validate(lesson)

    async def update_lesson(
        self,
        identity: CurrentUser,
        course_id: str,
        lesson_id: str,
        patch: LessonPatch,
    ) -> LessonResponse:
        """Update a lesson's title or status.

        Raises:
            NotFoundError: If the lesson does not exist under the course.
            AuthorizationError: If the caller did not author it and is not an admin.
        """
        lesson = await self._load(identity, course_id, lesson_id)
        allowed = self._engine.authorize(
            identity,
            Action.UPDATE,
            ResourceKind.LESSON,
            resource=Resource.from_lesson(lesson, identity.academy_id),
            patch=patch,
        ).enforce()

        updated = await self._repo.update_lesson(identity.academy_id, lesson_id, allowed)
        if updated is None:
            raise NotFoundError("Lesson not found")
        await self._db.commit()

        logger.info("Lesson updated: id=%s, by=%s", lesson_id, identity.id)
        return LessonResponse.model_validate(updated)

    async def delete_lesson(self, identity: CurrentUser, course_id: str, lesson_id: str) -> None:
        """Delete a lesson and its materials.

        Raises:
            NotFoundError: If the lesson does not exist under the course.
            AuthorizationError: If the caller is not an admin.
        """
        lesson = await self._load(identity, course_id, lesson_id)
        self._engine.authorize(
            identity,
            Action.DELETE,
            ResourceKind.LESSON,
            resource=Resource.from_lesson(lesson, identity.academy_id),
        ).enforce()

        if not await self._repo.delete_lesson(identity.academy_id, lesson_id):
            raise NotFoundError("Lesson not found")
        await self._db.commit()

        logger.info("Lesson deleted: id=%s, by=%s", lesson_id, identity.id)
