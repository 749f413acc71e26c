# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academy LMS: a multi-tenant learning management backend.

Academies own users, courses, lessons and lesson materials. Every request
is authenticated with a short-lived access token and every read and write
is confined to the caller's academy.
"""

__version__ = "0.1.0"
