# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course domain."""

from academy_lms.domains.course.service import CourseService

__all__ = ["CourseService"]
