# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User domain package.

Principals (directory entries) and caller resolution.
"""

from src.domains.user.service import (
    DirectoryService,
    InvalidPrincipalError,
    PrincipalNotFoundError,
)

__all__ = [
    "DirectoryService",
    "InvalidPrincipalError",
    "PrincipalNotFoundError",
]
