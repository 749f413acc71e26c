# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authorization domain: role, ownership and tenant decisions."""

from academy_lms.domains.authorization.engine import (
    Action,
    AuthorizationEngine,
    Decision,
    Resource,
    ResourceKind,
)

__all__ = [
    "Action",
    "AuthorizationEngine",
    "Decision",
    "Resource",
    "ResourceKind",
]
