# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User request and response models."""

from typing import Self

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from academy_lms.models.common import UserRole

_PASSWORD_MIN = 6


class UserCreateRequest(BaseModel):
    """Admin request to add a user to the caller's academy."""

    email: EmailStr
    password: str = Field(min_length=_PASSWORD_MIN, description="At least 6 characters")
    role: UserRole


class UserPatch(BaseModel):
    """Partial update of a user. Omitted fields keep their stored value."""

    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=_PASSWORD_MIN)
    role: UserRole | None = None


class UserResponse(BaseModel):
    """Public view of a user. The password hash is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: UserRole
    academy_id: str


class BootstrapUserRequest(BaseModel):
    """Out-of-band creation of an academy's first users.

    Either academy_id names an existing academy, or academy_name creates
    a new one.
    """

    email: EmailStr
    password: str = Field(min_length=_PASSWORD_MIN)
    role: UserRole
    academy_id: str | None = None
    academy_name: str | None = Field(default=None, min_length=1, max_length=200)

    @model_validator(mode="after")
    def require_academy(self) -> Self:
        if not self.academy_id and not self.academy_name:
            raise ValueError("Either academy_id or academy_name is required")
        return self
