# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Declarative base and shared column helpers."""

import secrets
import string
from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from academy_lms.utils.datetime import utc_now

_ID_ALPHABET = string.ascii_letters + string.digits + "_-"
ID_LENGTH = 21


def generate_id() -> str:
    """Generate a random 21-character URL-safe identifier."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(ID_LENGTH))


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class TimestampMixin:
    """Adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
