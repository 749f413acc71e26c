# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Material domain."""

from academy_lms.domains.material.service import MaterialService

__all__ = ["MaterialService"]
