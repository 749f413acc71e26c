# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lesson domain."""

from academy_lms.domains.lesson.service import LessonService

__all__ = ["LessonService"]
