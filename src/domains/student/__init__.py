# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package.

Enrollment, administrative edits and scoped listings of students.
"""

from src.domains.student.service import (
    ConcurrentUpdateError,
    StudentNotFoundError,
    StudentSchoolNotFoundError,
    StudentService,
)

__all__ = [
    "ConcurrentUpdateError",
    "StudentNotFoundError",
    "StudentSchoolNotFoundError",
    "StudentService",
]
