# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Root-level routes (outside the versioned API)."""

from academy_lms.api.routes.health import router as health_router

__all__ = ["health_router"]
