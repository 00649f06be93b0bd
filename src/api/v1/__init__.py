# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    auth: Signup, login, sessions, password reset, email verification.
    users: Provisioning of teachers and school admins.
    schools: School management and staff listing.
    students: Student roster and daily point sheets.
    classes: Teacher-owned class groupings.
"""

from fastapi import APIRouter

from src.api.v1 import auth, classes, schools, students, users

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(schools.router, prefix="/schools", tags=["Schools"])
router.include_router(students.router, prefix="/students", tags=["Students"])
router.include_router(classes.router, prefix="/classes", tags=["Classes"])

__all__ = ["router"]
