# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure.

All academies share one relational database. Tenant isolation lives in
TenantRepository, which filters every query by academy id.

Example:
    from academy_lms.infrastructure.database import get_session, TenantRepository

    async with get_session() as session:
        repo = TenantRepository(session)
        courses = await repo.list_courses(academy_id)
"""

from academy_lms.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_tables,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)
from academy_lms.infrastructure.database.repository import TenantRepository, apply_patch

__all__ = [
    "DatabaseError",
    "init_database",
    "close_database",
    "create_tables",
    "get_engine",
    "get_sessionmaker",
    "get_session",
    "check_database_connection",
    "TenantRepository",
    "apply_patch",
]
