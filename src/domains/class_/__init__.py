# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class domain package.

Teacher-owned classes and their member students.
"""

from src.domains.class_.service import (
    ClassMemberSchoolError,
    ClassNotFoundError,
    ClassService,
)

__all__ = [
    "ClassMemberSchoolError",
    "ClassNotFoundError",
    "ClassService",
]
