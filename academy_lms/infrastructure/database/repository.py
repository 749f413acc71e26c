# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant-scoped data access.

Every read and write takes the caller's academy id and filters by it.
Lessons and materials carry no academy column, so their queries join
through Course. A record that exists in another academy is returned as
None, exactly like one that does not exist at all.

Two lookups are deliberately global and say so in their names:
get_user_by_email_global (login and email uniqueness) and get_user_global
(re-fetching a user named by a verified refresh token).

Repository methods flush but never commit. The calling service commits
once per operation.

Example:
    repo = TenantRepository(session)
    course = await repo.get_course(identity.academy_id, course_id)
    if course is None:
        raise NotFoundError("Course not found")
"""

import logging
from collections.abc import Iterable

from pydantic import BaseModel
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy_lms.core.errors import ConflictError, NotFoundError
from academy_lms.infrastructure.database.models import (
    Academy,
    Course,
    Lesson,
    Material,
    User,
)
from academy_lms.models.common import LessonStatus, UserRole

logger = logging.getLogger(__name__)

COURSE_FIELDS = ("title", "instructor_user_id")
LESSON_FIELDS = ("title", "status")
MATERIAL_FIELDS = ("filename", "url")
USER_FIELDS = ("email", "role")


def apply_patch(entity: object, patch: BaseModel, fields: Iterable[str]) -> list[str]:
    """Copy the fields present in a patch onto an entity.

    A field is written only when the patch carries a value for it (not
    None). Fields outside ``fields`` are never touched.

    Args:
        entity: ORM instance to modify.
        patch: Partial update model.
        fields: Names of the fields that may be written.

    Returns:
        Names of the fields that were written.
    """
    written = []
    for name in fields:
        value = getattr(patch, name, None)
        if value is not None:
            setattr(entity, name, value)
            written.append(name)
    return written


class TenantRepository:
    """Academy-scoped reads and writes for all LMS entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ========== Academies ==========

    async def get_academy(self, academy_id: str) -> Academy | None:
        return await self._session.get(Academy, academy_id)

    async def create_academy(self, name: str, academy_id: str | None = None) -> Academy:
        academy = Academy(name=name)
        if academy_id is not None:
            academy.id = academy_id
        self._session.add(academy)
        await self._session.flush()
        logger.info("Academy created: id=%s, name=%s", academy.id, name)
        return academy

    # ========== Users ==========

    async def get_user_by_email_global(self, email: str) -> User | None:
        """Look up a user by email across all academies.

        Only login and email uniqueness checks may use this.
        """
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_global(self, user_id: str) -> User | None:
        """Look up a user by id across all academies.

        Only used to re-fetch the subject of a verified refresh token.
        """
        return await self._session.get(User, user_id)

    async def get_user(self, academy_id: str, user_id: str) -> User | None:
        result = await self._session.execute(
            select(User).where(User.id == user_id, User.academy_id == academy_id)
        )
        return result.scalar_one_or_none()

    async def list_users(self, academy_id: str) -> list[User]:
        result = await self._session.execute(
            select(User).where(User.academy_id == academy_id).order_by(User.created_at, User.id)
        )
        return list(result.scalars().all())

    async def create_user(
        self,
        academy_id: str,
        email: str,
        password_hash: str,
        role: UserRole,
    ) -> User:
        """Insert a user into an academy.

        Raises:
            ConflictError: If the email is already registered.
        """
        user = User(
            email=email,
            password_hash=password_hash,
            role=role,
            academy_id=academy_id,
        )
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError:
            await self._session.rollback()
            raise ConflictError("User with this email already exists") from None
        return user

    async def update_user(
        self,
        academy_id: str,
        user_id: str,
        patch: BaseModel,
        password_hash: str | None = None,
    ) -> User | None:
        """Apply a patch to a user of the academy.

        Raises:
            ConflictError: If the new email is already registered.
        """
        user = await self.get_user(academy_id, user_id)
        if user is None:
            return None
        apply_patch(user, patch, USER_FIELDS)
        if password_hash is not None:
            user.password_hash = password_hash
        try:
            await self._session.flush()
        except IntegrityError:
            await self._session.rollback()
            raise ConflictError("Email already taken by another user") from None
        return user

    async def delete_user(self, academy_id: str, user_id: str) -> bool:
        user = await self.get_user(academy_id, user_id)
        if user is None:
            return False
        await self._session.delete(user)
        await self._session.flush()
        return True

    async def count_courses_by_instructor(self, academy_id: str, user_id: str) -> int:
        result = await self._session.execute(
            select(func.count())
            .select_from(Course)
            .where(Course.academy_id == academy_id, Course.instructor_user_id == user_id)
        )
        return int(result.scalar_one())

    # ========== Courses ==========

    async def get_course(self, academy_id: str, course_id: str) -> Course | None:
        result = await self._session.execute(
            select(Course).where(Course.id == course_id, Course.academy_id == academy_id)
        )
        return result.scalar_one_or_none()

    async def list_courses(self, academy_id: str) -> list[Course]:
        result = await self._session.execute(
            select(Course)
            .where(Course.academy_id == academy_id)
            .order_by(Course.created_at, Course.id)
        )
        return list(result.scalars().all())

    async def create_course(
        self,
        academy_id: str,
        title: str,
        instructor_user_id: str,
    ) -> Course:
        course = Course(
            title=title,
            academy_id=academy_id,
            instructor_user_id=instructor_user_id,
        )
        self._session.add(course)
        await self._session.flush()
        return course

    async def update_course(
        self,
        academy_id: str,
        course_id: str,
        patch: BaseModel,
    ) -> Course | None:
        course = await self.get_course(academy_id, course_id)
        if course is None:
            return None
        apply_patch(course, patch, COURSE_FIELDS)
        await self._session.flush()
        return course

    async def delete_course(self, academy_id: str, course_id: str) -> bool:
        """Delete a course together with its lessons and their materials."""
        course = await self.get_course(academy_id, course_id)
        if course is None:
            return False
        lesson_ids = select(Lesson.id).where(Lesson.course_id == course.id)
        await self._session.execute(
            delete(Material)
            .where(Material.lesson_id.in_(lesson_ids))
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(
            delete(Lesson)
            .where(Lesson.course_id == course.id)
            .execution_options(synchronize_session=False)
        )
        await self._session.delete(course)
        await self._session.flush()
        return True

    # ========== Lessons ==========

    def _lesson_query(self, academy_id: str):
        return (
            select(Lesson)
            .join(Course, Lesson.course_id == Course.id)
            .where(Course.academy_id == academy_id)
        )

    async def get_lesson(
        self,
        academy_id: str,
        lesson_id: str,
        course_id: str | None = None,
    ) -> Lesson | None:
        """Fetch a lesson of the academy, optionally pinned to a course."""
        query = self._lesson_query(academy_id).where(Lesson.id == lesson_id)
        if course_id is not None:
            query = query.where(Lesson.course_id == course_id)
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def list_lessons(self, academy_id: str, course_id: str) -> list[Lesson]:
        result = await self._session.execute(
            self._lesson_query(academy_id)
            .where(Lesson.course_id == course_id)
            .order_by(Lesson.created_at, Lesson.id)
        )
        return list(result.scalars().all())

    async def create_lesson(
        self,
        academy_id: str,
        course_id: str,
        title: str,
        status: LessonStatus,
        author_user_id: str,
    ) -> Lesson:
        """Insert a lesson into a course of the academy.

        Raises:
            NotFoundError: If the course is not in the academy.
        """
        if await self.get_course(academy_id, course_id) is None:
            raise NotFoundError("Course not found")
        lesson = Lesson(
            title=title,
            status=status,
            course_id=course_id,
            author_user_id=author_user_id,
        )
        self._session.add(lesson)
        await self._session.flush()
        return lesson

    async def update_lesson(
        self,
        academy_id: str,
        lesson_id: str,
        patch: BaseModel,
    ) -> Lesson | None:
        lesson = await self.get_lesson(academy_id, lesson_id)
        if lesson is None:
            return None
        apply_patch(lesson, patch, LESSON_FIELDS)
        await self._session.flush()
        return lesson

    async def delete_lesson(self, academy_id: str, lesson_id: str) -> bool:
        """Delete a lesson together with its materials."""
        lesson = await self.get_lesson(academy_id, lesson_id)
        if lesson is None:
            return False
        await self._session.execute(
            delete(Material)
            .where(Material.lesson_id == lesson.id)
            .execution_options(synchronize_session=False)
        )
        await self._session.delete(lesson)
        await self._session.flush()
        return True

    # ========== Materials ==========

    def _material_query(self, academy_id: str):
        return (
            select(Material, Lesson)
            .join(Lesson, Material.lesson_id == Lesson.id)
            .join(Course, Lesson.course_id == Course.id)
            .where(Course.academy_id == academy_id)
        )

    async def get_material_with_lesson(
        self,
        academy_id: str,
        material_id: str,
    ) -> tuple[Material, Lesson] | None:
        """Fetch a material and its parent lesson.

        The lesson's author is the material's owner for permission checks.
        """
        result = await self._session.execute(
            self._material_query(academy_id).where(Material.id == material_id)
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def get_material(self, academy_id: str, material_id: str) -> Material | None:
        found = await self.get_material_with_lesson(academy_id, material_id)
        return found[0] if found else None

    async def list_materials(
        self,
        academy_id: str,
        lesson_id: str | None = None,
    ) -> list[Material]:
        query = self._material_query(academy_id)
        if lesson_id is not None:
            query = query.where(Material.lesson_id == lesson_id)
        result = await self._session.execute(query.order_by(Material.created_at, Material.id))
        return [row[0] for row in result.all()]

    async def create_material(
        self,
        academy_id: str,
        lesson_id: str,
        filename: str,
        url: str,
    ) -> Material:
        """Insert a material into a lesson of the academy.

        Raises:
            NotFoundError: If the lesson is not in the academy.
        """
        if await self.get_lesson(academy_id, lesson_id) is None:
            raise NotFoundError("Lesson not found")
        material = Material(filename=filename, url=url, lesson_id=lesson_id)
        self._session.add(material)
        await self._session.flush()
        return material

    async def update_material(
        self,
        academy_id: str,
        material_id: str,
        patch: BaseModel,
    ) -> Material | None:
        material = await self.get_material(academy_id, material_id)
        if material is None:
            return None
        apply_patch(material, patch, MATERIAL_FIELDS)
        await self._session.flush()
        return material

    async def delete_material(self, academy_id: str, material_id: str) -> bool:
        material = await self.get_material(academy_id, material_id)
        if material is None:
            return False
        await self._session.delete(material)
        await self._session.flush()
        return True
