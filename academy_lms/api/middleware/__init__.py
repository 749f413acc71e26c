# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

- RateLimitMiddleware: Per-address and per-API-key request limits.
- AuthMiddleware: Access token verification.
"""

from academy_lms.api.middleware.auth import AuthMiddleware, get_current_user
from academy_lms.api.middleware.rate_limit import RateLimitMiddleware, get_client_ip

__all__ = [
    "AuthMiddleware",
    "RateLimitMiddleware",
    "get_current_user",
    "get_client_ip",
]
