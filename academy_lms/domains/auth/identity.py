# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authenticated caller identity.

The identity is rebuilt from access token claims on every request. It is
the only input the authorization engine trusts about who is acting.
"""

from dataclasses import dataclass

from academy_lms.domains.auth.jwt import AccessTokenClaims
from academy_lms.models.common import UserRole


@dataclass(frozen=True)
class CurrentUser:
    """Current authenticated user from an access token.

    Attributes:
        id: User ID.
        email: User email at token issue time.
        role: User role at token issue time.
        academy_id: Academy the user belongs to.
    """

    id: str
    email: str
    role: UserRole
    academy_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", UserRole(self.role))

    @classmethod
    def from_claims(cls, claims: AccessTokenClaims) -> "CurrentUser":
        """Build the identity from decoded access token claims."""
        return cls(
            id=claims.sub,
            email=claims.email,
            role=claims.role,
            academy_id=claims.academy_id,
        )
