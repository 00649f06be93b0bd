# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School domain package.

School CRUD, scoped reads and staff listings.
"""

from src.domains.school.service import SchoolNotFoundError, SchoolService

__all__ = [
    "SchoolNotFoundError",
    "SchoolService",
]
