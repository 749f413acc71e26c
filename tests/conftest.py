# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Settings pointing at in-memory SQLite and the in-memory key-value store
- A database session with all tables created
- Two seeded academies with one user per role
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from academy_lms.core.config import (
    CacheSettings,
    DatabaseSettings,
    JWTSettings,
    RateLimitSettings,
    SecuritySettings,
    Settings,
)
from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.domains.auth.jwt import JWTManager
from academy_lms.domains.auth.password import PasswordHasher
from academy_lms.infrastructure.cache.memory import MemoryKeyValueStore
from academy_lms.infrastructure.database.connection import create_engine_for, create_tables
from academy_lms.infrastructure.database.models import User
from academy_lms.infrastructure.database.repository import TenantRepository
from academy_lms.models.common import UserRole

TEST_PASSWORD = "secret1"
BOOTSTRAP_TOKEN = "test-bootstrap-token"


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Provide settings for an isolated, in-process stack.

    Rate limiting is disabled here; rate limit tests enable it explicitly.
    """
    return Settings(
        environment="test",
        debug=True,
        log_level="DEBUG",
        database=DatabaseSettings(dsn="sqlite+aiosqlite:///:memory:"),
        cache=CacheSettings(backend="memory"),
        jwt=JWTSettings(
            secret_key=SecretStr("test-secret-key-for-jwt-testing"),
            access_token_expire_minutes=15,
            refresh_token_expire_days=7,
        ),
        rate_limit=RateLimitSettings(enabled=False),
        security=SecuritySettings(
            bcrypt_rounds=4,
            bootstrap_token=SecretStr(BOOTSTRAP_TOKEN),
        ),
    )


@pytest.fixture
def jwt_manager(settings: Settings) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(settings.jwt)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Create a fast password hasher."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def db_session(settings: Settings) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on a fresh in-memory database."""
    engine = create_engine_for(settings)
    await create_tables(engine)
    sessionmaker = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    async with sessionmaker() as session:
        yield session
    await engine.dispose()


@dataclass
class Seeded:
    """Two academies, each with an admin, a teacher and a student.

    Academy A also has a second teacher.
    """

    academy_a: str
    academy_b: str
    admin_a: User
    teacher_a: User
    teacher2_a: User
    student_a: User
    admin_b: User
    teacher_b: User
    student_b: User


def identity_of(user: User) -> CurrentUser:
    """Build the identity an access token for user would carry."""
    return CurrentUser(id=user.id, email=user.email, role=user.role, academy_id=user.academy_id)


@pytest_asyncio.fixture
async def seeded(db_session: AsyncSession, password_hasher: PasswordHasher) -> Seeded:
    """Seed two academies with one user per role."""
    repo = TenantRepository(db_session)
    password_hash = password_hasher.hash(TEST_PASSWORD)

    academy_a = await repo.create_academy("Academy A")
    academy_b = await repo.create_academy("Academy B")

    async def user(academy_id: str, email: str, role: UserRole) -> User:
        return await repo.create_user(academy_id, email, password_hash, role)

    result = Seeded(
        academy_a=academy_a.id,
        academy_b=academy_b.id,
        admin_a=await user(academy_a.id, "admin@academy-a.io", UserRole.ADMIN),
        teacher_a=await user(academy_a.id, "teacher@academy-a.io", UserRole.TEACHER),
        teacher2_a=await user(academy_a.id, "teacher2@academy-a.io", UserRole.TEACHER),
        student_a=await user(academy_a.id, "student@academy-a.io", UserRole.STUDENT),
        admin_b=await user(academy_b.id, "admin@academy-b.io", UserRole.ADMIN),
        teacher_b=await user(academy_b.id, "teacher@academy-b.io", UserRole.TEACHER),
        student_b=await user(academy_b.id, "student@academy-b.io", UserRole.STUDENT),
    )
    await db_session.commit()
    return result
