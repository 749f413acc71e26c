# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the domain services.

Services run against in-memory SQLite and the in-memory key-value store.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from academy_lms.core.config import Settings
from academy_lms.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from academy_lms.domains.auth.jwt import JWTManager
from academy_lms.domains.auth.password import PasswordHasher
from academy_lms.domains.auth.service import (
    AuthService,
    InvalidCredentialsError,
    TokenRefreshError,
)
from academy_lms.domains.auth.session_store import SessionStore
from academy_lms.domains.course.service import CourseService
from academy_lms.domains.lesson.service import LessonService
from academy_lms.domains.material.service import MaterialService
from academy_lms.domains.user.service import UserService
from academy_lms.infrastructure.cache.base import CacheError
from academy_lms.infrastructure.cache.memory import MemoryKeyValueStore
from academy_lms.models.common import LessonStatus, UserRole
from academy_lms.models.course import CourseCreateRequest, CoursePatch
from academy_lms.models.lesson import LessonCreateRequest, LessonPatch
from academy_lms.models.material import MaterialCreateRequest, MaterialPatch
from academy_lms.models.user import BootstrapUserRequest, UserCreateRequest, UserPatch
from academy_lms.utils.datetime import utc_now
from tests.conftest import TEST_PASSWORD, Seeded, identity_of

FILE_URL = "https://files.example.com/slides.pdf"


class SteppingClock:
    """UTC clock moved forward by hand."""

    def __init__(self) -> None:
        self.now = utc_now().replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now


class BrokenStore(MemoryKeyValueStore):
    """Key-value store whose every call fails."""

    async def get(self, key: str) -> str | None:
        raise CacheError("store down")

    async def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        raise CacheError("store down")

    async def delete(self, key: str) -> bool:
        raise CacheError("store down")


@pytest.fixture
def sessions(memory_store: MemoryKeyValueStore) -> SessionStore:
    return SessionStore(memory_store, ttl_seconds=3600)


@pytest.fixture
def auth_service(
    db_session: AsyncSession,
    jwt_manager: JWTManager,
    sessions: SessionStore,
    password_hasher: PasswordHasher,
) -> AuthService:
    return AuthService(db_session, jwt_manager, sessions, password_hasher)


@pytest.fixture
def user_service(
    db_session: AsyncSession,
    password_hasher: PasswordHasher,
    sessions: SessionStore,
) -> UserService:
    return UserService(db_session, password_hasher, session_store=sessions)


@pytest.fixture
def course_service(db_session: AsyncSession) -> CourseService:
    return CourseService(db_session)


@pytest.fixture
def lesson_service(db_session: AsyncSession) -> LessonService:
    return LessonService(db_session)


@pytest.fixture
def material_service(db_session: AsyncSession) -> MaterialService:
    return MaterialService(db_session)


class TestAuthService:
    """Tests for login, refresh and logout."""

    async def test_login_returns_tokens_and_user(
        self,
        auth_service: AuthService,
        sessions: SessionStore,
        seeded: Seeded,
    ) -> None:
        result = await auth_service.login("teacher@academy-a.io", TEST_PASSWORD)

        assert result.token_type == "Bearer"
        assert result.expires_in == 15 * 60
        assert result.user.id == seeded.teacher_a.id
        assert result.user.role == UserRole.TEACHER
        assert await sessions.matches(seeded.teacher_a.id, result.refresh_token)

    @pytest.mark.parametrize(
        ("email", "password"),
        [
            ("teacher@academy-a.io", "wrong-password"),
            ("nobody@academy-a.io", TEST_PASSWORD),
        ],
    )
    async def test_login_failures_look_the_same(
        self,
        auth_service: AuthService,
        seeded: Seeded,
        email: str,
        password: str,
    ) -> None:
        """Test that unknown email and wrong password give the same error."""
        with pytest.raises(InvalidCredentialsError, match="Invalid credentials"):
            await auth_service.login(email, password)

    async def test_second_login_invalidates_first_refresh_token(
        self,
        auth_service: AuthService,
        seeded: Seeded,
    ) -> None:
        first = await auth_service.login("teacher@academy-a.io", TEST_PASSWORD)
        second = await auth_service.login("teacher@academy-a.io", TEST_PASSWORD)

        with pytest.raises(TokenRefreshError):
            await auth_service.refresh(first.refresh_token)
        assert (await auth_service.refresh(second.refresh_token)).access_token

    async def test_refresh_does_not_rotate(
        self,
        auth_service: AuthService,
        seeded: Seeded,
    ) -> None:
        """Test that the same refresh token can be used repeatedly."""
        login = await auth_service.login("student@academy-a.io", TEST_PASSWORD)

        first = await auth_service.refresh(login.refresh_token)
        second = await auth_service.refresh(login.refresh_token)

        assert first.access_token
        assert second.access_token
        assert first.expires_in == 15 * 60

    async def test_refresh_issues_access_token_with_later_expiry(
        self,
        db_session: AsyncSession,
        settings: Settings,
        sessions: SessionStore,
        password_hasher: PasswordHasher,
        seeded: Seeded,
    ) -> None:
        """Test that refreshing later yields an access token that expires later."""
        clock = SteppingClock()
        jwt_manager = JWTManager(settings.jwt, clock=clock)
        service = AuthService(db_session, jwt_manager, sessions, password_hasher)

        login = await service.login("student@academy-a.io", TEST_PASSWORD)
        clock.now += timedelta(minutes=10)
        fresh = await service.refresh(login.refresh_token)

        issued = jwt_manager.decode_access_token(login.access_token)
        refreshed = jwt_manager.decode_access_token(fresh.access_token)
        assert refreshed.exp > issued.exp
        assert refreshed.exp - issued.exp == 10 * 60
        assert refreshed.sub == issued.sub == seeded.student_a.id

    async def test_refresh_reflects_role_change(
        self,
        auth_service: AuthService,
        user_service: UserService,
        jwt_manager: JWTManager,
        seeded: Seeded,
    ) -> None:
        """Test that a refreshed access token carries the current role."""
        login = await auth_service.login("student@academy-a.io", TEST_PASSWORD)
        await user_service.update_user(
            identity_of(seeded.admin_a),
            seeded.student_a.id,
            UserPatch(role=UserRole.TEACHER),
        )

        fresh = await auth_service.refresh(login.refresh_token)

        assert jwt_manager.decode_access_token(fresh.access_token).role == UserRole.TEACHER

    async def test_refresh_with_access_token_rejected(
        self,
        auth_service: AuthService,
        seeded: Seeded,
    ) -> None:
        login = await auth_service.login("student@academy-a.io", TEST_PASSWORD)

        with pytest.raises(TokenRefreshError, match="Invalid refresh token"):
            await auth_service.refresh(login.access_token)

    async def test_logout_revokes_refresh(
        self,
        auth_service: AuthService,
        seeded: Seeded,
    ) -> None:
        login = await auth_service.login("student@academy-a.io", TEST_PASSWORD)

        await auth_service.logout(login.refresh_token)

        with pytest.raises(TokenRefreshError):
            await auth_service.refresh(login.refresh_token)

    async def test_logout_with_garbage_token_is_silent(
        self,
        auth_service: AuthService,
        seeded: Seeded,
    ) -> None:
        await auth_service.logout("not-a-token")

    async def test_store_failure_is_unexpected_error(
        self,
        db_session: AsyncSession,
        jwt_manager: JWTManager,
        password_hasher: PasswordHasher,
        seeded: Seeded,
    ) -> None:
        service = AuthService(
            db_session,
            jwt_manager,
            SessionStore(BrokenStore(), ttl_seconds=60),
            password_hasher,
        )

        with pytest.raises(UnexpectedError, match="Login failed"):
            await service.login("student@academy-a.io", TEST_PASSWORD)


class TestCourseService:
    """Tests for course operations."""

    async def test_teacher_creates_own_course(
        self,
        course_service: CourseService,
        seeded: Seeded,
    ) -> None:
        course = await course_service.create_course(
            identity_of(seeded.teacher_a),
            CourseCreateRequest(title="Algebra", instructor_user_id=seeded.teacher_a.id),
        )

        assert course.academy_id == seeded.academy_a
        assert course.instructor_user_id == seeded.teacher_a.id

    async def test_teacher_cannot_create_for_colleague(
        self,
        course_service: CourseService,
        seeded: Seeded,
    ) -> None:
        with pytest.raises(AuthorizationError, match="for themselves"):
            await course_service.create_course(
                identity_of(seeded.teacher_a),
                CourseCreateRequest(title="Algebra", instructor_user_id=seeded.teacher2_a.id),
            )

    async def test_instructor_must_be_staff_of_academy(
        self,
        course_service: CourseService,
        seeded: Seeded,
    ) -> None:
        admin = identity_of(seeded.admin_a)

        with pytest.raises(ValidationError, match="admin or teacher"):
            await course_service.create_course(
                admin,
                CourseCreateRequest(title="Algebra", instructor_user_id=seeded.student_a.id),
            )
        with pytest.raises(ValidationError, match="does not belong"):
            await course_service.create_course(
                admin,
                CourseCreateRequest(title="Algebra", instructor_user_id=seeded.teacher_b.id),
            )

    async def test_update_and_cross_academy_hidden(
        self,
        course_service: CourseService,
        seeded: Seeded,
    ) -> None:
        course = await course_service.create_course(
            identity_of(seeded.admin_a),
            CourseCreateRequest(title="Algebra", instructor_user_id=seeded.teacher_a.id),
        )

        updated = await course_service.update_course(
            identity_of(seeded.teacher_a), course.id, CoursePatch(title="Algebra II")
        )
        assert updated.title == "Algebra II"

        with pytest.raises(NotFoundError):
            await course_service.get_course(identity_of(seeded.admin_b), course.id)
        with pytest.raises(AuthorizationError):
            await course_service.update_course(
                identity_of(seeded.student_a), course.id, CoursePatch(title="Hacked")
            )

    async def test_admin_deletes_course_once(
        self,
        course_service: CourseService,
        seeded: Seeded,
    ) -> None:
        admin = identity_of(seeded.admin_a)
        course = await course_service.create_course(
            admin,
            CourseCreateRequest(title="Algebra", instructor_user_id=seeded.admin_a.id),
        )

        await course_service.delete_course(admin, course.id)

        with pytest.raises(NotFoundError):
            await course_service.delete_course(admin, course.id)
        assert await course_service.list_courses(admin) == []


class TestLessonAndMaterialServices:
    """Tests for lesson and material operations."""

    async def _course_with_lesson(
        self,
        course_service: CourseService,
        lesson_service: LessonService,
        seeded: Seeded,
    ) -> tuple[str, str]:
        teacher = identity_of(seeded.teacher_a)
        course = await course_service.create_course(
            teacher,
            CourseCreateRequest(title="Algebra", instructor_user_id=seeded.teacher_a.id),
        )
        lesson = await lesson_service.create_lesson(
            teacher, course.id, LessonCreateRequest(title="Intro")
        )
        return course.id, lesson.id

    async def test_lesson_author_is_caller(
        self,
        course_service: CourseService,
        lesson_service: LessonService,
        seeded: Seeded,
    ) -> None:
        course_id, lesson_id = await self._course_with_lesson(
            course_service, lesson_service, seeded
        )

        lesson = await lesson_service.get_lesson(identity_of(seeded.student_a), course_id, lesson_id)

        assert lesson.author_user_id == seeded.teacher_a.id
        assert lesson.status == LessonStatus.DRAFT

    async def test_colleague_cannot_add_lesson(
        self,
        course_service: CourseService,
        lesson_service: LessonService,
        seeded: Seeded,
    ) -> None:
        course_id, _ = await self._course_with_lesson(course_service, lesson_service, seeded)

        with pytest.raises(AuthorizationError, match="their own courses"):
            await lesson_service.create_lesson(
                identity_of(seeded.teacher2_a), course_id, LessonCreateRequest(title="Mine")
            )

    async def test_admin_lesson_in_teacher_course_is_admin_owned(
        self,
        course_service: CourseService,
        lesson_service: LessonService,
        seeded: Seeded,
    ) -> None:
        """Test that the course's instructor cannot edit a lesson an admin wrote."""
        course_id, _ = await self._course_with_lesson(course_service, lesson_service, seeded)
        admin_lesson = await lesson_service.create_lesson(
            identity_of(seeded.admin_a), course_id, LessonCreateRequest(title="Admin notes")
        )

        with pytest.raises(AuthorizationError, match="their own lessons"):
            await lesson_service.update_lesson(
                identity_of(seeded.teacher_a),
                course_id,
                admin_lesson.id,
                LessonPatch(status=LessonStatus.PUBLISHED),
            )

    async def test_lesson_under_wrong_course_not_found(
        self,
        course_service: CourseService,
        lesson_service: LessonService,
        seeded: Seeded,
    ) -> None:
        _, lesson_id = await self._course_with_lesson(course_service, lesson_service, seeded)
        other = await course_service.create_course(
            identity_of(seeded.teacher_a),
            CourseCreateRequest(title="Geometry", instructor_user_id=seeded.teacher_a.id),
        )

        with pytest.raises(NotFoundError, match="Lesson not found"):
            await lesson_service.get_lesson(identity_of(seeded.teacher_a), other.id, lesson_id)

    async def test_material_lifecycle(
        self,
        course_service: CourseService,
        lesson_service: LessonService,
        material_service: MaterialService,
        seeded: Seeded,
    ) -> None:
        _, lesson_id = await self._course_with_lesson(course_service, lesson_service, seeded)
        teacher = identity_of(seeded.teacher_a)
        student = identity_of(seeded.student_a)

        material = await material_service.create_material(
            teacher,
            MaterialCreateRequest(lesson_id=lesson_id, filename="slides.pdf", url=FILE_URL),
        )
        assert material.url == FILE_URL

        listed = await material_service.list_materials(student, lesson_id)
        assert [m.id for m in listed] == [material.id]

        with pytest.raises(AuthorizationError, match="Students cannot update materials"):
            await material_service.update_material(
                student, material.id, MaterialPatch(filename="x.pdf")
            )
        with pytest.raises(AuthorizationError, match="their own lessons"):
            await material_service.delete_material(identity_of(seeded.teacher2_a), material.id)
        with pytest.raises(NotFoundError):
            await material_service.get_material(identity_of(seeded.admin_b), material.id)

        renamed = await material_service.update_material(
            teacher, material.id, MaterialPatch(filename="deck.pdf")
        )
        assert renamed.filename == "deck.pdf"
        assert renamed.url == FILE_URL

        await material_service.delete_material(teacher, material.id)
        assert await material_service.list_materials(teacher) == []

    async def test_list_materials_of_unknown_lesson(
        self,
        material_service: MaterialService,
        seeded: Seeded,
    ) -> None:
        with pytest.raises(NotFoundError, match="Lesson not found"):
            await material_service.list_materials(identity_of(seeded.admin_a), "missing")


class TestUserService:
    """Tests for user management."""

    async def test_admin_creates_user_in_own_academy(
        self,
        user_service: UserService,
        seeded: Seeded,
    ) -> None:
        created = await user_service.create_user(
            identity_of(seeded.admin_a),
            UserCreateRequest(email="new@academy-a.io", password="secret1", role=UserRole.TEACHER),
        )

        assert created.academy_id == seeded.academy_a
        assert created.role == UserRole.TEACHER

    async def test_create_user_duplicate_email(
        self,
        user_service: UserService,
        seeded: Seeded,
    ) -> None:
        with pytest.raises(ConflictError, match="already exists"):
            await user_service.create_user(
                identity_of(seeded.admin_a),
                UserCreateRequest(
                    email="student@academy-b.io", password="secret1", role=UserRole.STUDENT
                ),
            )

    async def test_non_admin_cannot_list_users(
        self,
        user_service: UserService,
        seeded: Seeded,
    ) -> None:
        with pytest.raises(AuthorizationError, match="Only admins can view all users"):
            await user_service.list_users(identity_of(seeded.teacher_a))

    async def test_self_update_keeps_role(
        self,
        user_service: UserService,
        seeded: Seeded,
    ) -> None:
        student = identity_of(seeded.student_a)

        updated = await user_service.update_user(
            student,
            seeded.student_a.id,
            UserPatch(email="me@academy-a.io", role=UserRole.STUDENT),
        )
        assert updated.email == "me@academy-a.io"

        with pytest.raises(AuthorizationError, match="change user roles"):
            await user_service.update_user(
                student, seeded.student_a.id, UserPatch(role=UserRole.ADMIN)
            )

    async def test_update_to_taken_email_conflicts(
        self,
        user_service: UserService,
        seeded: Seeded,
    ) -> None:
        with pytest.raises(ConflictError, match="Email already taken"):
            await user_service.update_user(
                identity_of(seeded.teacher_a),
                seeded.teacher_a.id,
                UserPatch(email="admin@academy-b.io"),
            )

    async def test_password_change_allows_new_login(
        self,
        user_service: UserService,
        auth_service: AuthService,
        seeded: Seeded,
    ) -> None:
        await user_service.update_user(
            identity_of(seeded.student_a), seeded.student_a.id, UserPatch(password="another1")
        )

        assert (await auth_service.login("student@academy-a.io", "another1")).user.id
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("student@academy-a.io", TEST_PASSWORD)

    async def test_cannot_delete_instructor(
        self,
        user_service: UserService,
        course_service: CourseService,
        seeded: Seeded,
    ) -> None:
        admin = identity_of(seeded.admin_a)
        await course_service.create_course(
            admin,
            CourseCreateRequest(title="Algebra", instructor_user_id=seeded.teacher_a.id),
        )

        with pytest.raises(ConflictError, match="instructor"):
            await user_service.delete_user(admin, seeded.teacher_a.id)

    async def test_delete_user_revokes_session(
        self,
        user_service: UserService,
        auth_service: AuthService,
        sessions: SessionStore,
        seeded: Seeded,
    ) -> None:
        login = await auth_service.login("student@academy-a.io", TEST_PASSWORD)

        await user_service.delete_user(identity_of(seeded.admin_a), seeded.student_a.id)

        assert await sessions.get(seeded.student_a.id) is None
        with pytest.raises(TokenRefreshError):
            await auth_service.refresh(login.refresh_token)
        with pytest.raises(NotFoundError):
            await user_service.get_user(identity_of(seeded.admin_a), seeded.student_a.id)

    async def test_delete_user_in_other_academy_hidden(
        self,
        user_service: UserService,
        seeded: Seeded,
    ) -> None:
        with pytest.raises(NotFoundError):
            await user_service.delete_user(identity_of(seeded.admin_b), seeded.student_a.id)

    async def test_bootstrap_creates_academy(
        self,
        user_service: UserService,
        db_session: AsyncSession,
    ) -> None:
        created = await user_service.bootstrap_user(
            BootstrapUserRequest(
                email="founder@academy-c.io",
                password="secret1",
                role=UserRole.ADMIN,
                academy_name="Academy C",
            )
        )

        assert created.role == UserRole.ADMIN
        assert created.academy_id

    async def test_bootstrap_unknown_academy_without_name(
        self,
        user_service: UserService,
        seeded: Seeded,
    ) -> None:
        with pytest.raises(NotFoundError, match="Academy not found"):
            await user_service.bootstrap_user(
                BootstrapUserRequest(
                    email="x@academy-c.io",
                    password="secret1",
                    role=UserRole.ADMIN,
                    academy_id="missing",
                )
            )

    async def test_bootstrap_into_existing_academy(
        self,
        user_service: UserService,
        seeded: Seeded,
    ) -> None:
        created = await user_service.bootstrap_user(
            BootstrapUserRequest(
                email="second-admin@academy-a.io",
                password="secret1",
                role=UserRole.ADMIN,
                academy_id=seeded.academy_a,
            )
        )

        assert created.academy_id == seeded.academy_a
