# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for academies and their users, courses, lessons and materials.

Relationships are expressed as plain foreign-key columns. Tenant scoping
and cascading deletes are done explicitly by TenantRepository so that every
query carries its academy filter in plain sight.
"""

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from academy_lms.infrastructure.database.models.base import (
    ID_LENGTH,
    Base,
    TimestampMixin,
    generate_id,
)
from academy_lms.models.common import LessonStatus, UserRole


def _enum_values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]


class Academy(Base, TimestampMixin):
    """Tenant boundary."""

    __tablename__ = "academies"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    def __repr__(self) -> str:
        return f"<Academy(id={self.id}, name={self.name})>"


class User(Base, TimestampMixin):
    """Account belonging to exactly one academy.

    The email is unique across all academies. academy_id never changes
    after creation.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=generate_id)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
    )
    academy_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("academies.id"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Course(Base, TimestampMixin):
    """Course taught by an admin or teacher of the same academy."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=generate_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    academy_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("academies.id"),
        nullable=False,
        index=True,
    )
    instructor_user_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title={self.title})>"


class Lesson(Base, TimestampMixin):
    """Lesson inside a course.

    author_user_id records the creator and is never updated. It is not a
    foreign key so that removing the author leaves the lesson readable.
    """

    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=generate_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[LessonStatus] = mapped_column(
        Enum(LessonStatus, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
        default=LessonStatus.DRAFT,
    )
    course_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("courses.id"),
        nullable=False,
        index=True,
    )
    author_user_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, title={self.title}, status={self.status})>"


class Material(Base, TimestampMixin):
    """File reference attached to a lesson. Only the storage URL is kept."""

    __tablename__ = "materials"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=generate_id)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    lesson_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("lessons.id"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Material(id={self.id}, filename={self.filename})>"
