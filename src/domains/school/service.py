# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School service.

This module provides the SchoolService that handles:
- School CRUD operations (super admin only)
- Scoped reads for school members
- Listing a school's teachers

Example:
    >>> school_service = SchoolService(db_session)
    >>> school = await school_service.create_school(caller, request)
    >>> schools, total = await school_service.list_schools(caller)
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import NotFoundError
from src.domains.auth.policy import (
    Caller,
    can_list_school_staff,
    can_manage_schools,
    can_view_school,
)
from src.domains.user.service import DirectoryService
from src.infrastructure.database.models.principal import Principal
from src.infrastructure.database.models.school import School
from src.models.common import Role
from src.models.school import SchoolCreateRequest, SchoolUpdateRequest

logger = logging.getLogger(__name__)


class SchoolNotFoundError(NotFoundError):
    """Raised when a school is not found."""


class SchoolService:
    """Service for managing schools.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the school service.

        Args:
            db: Async database session.
        """
        self._db = db

    async def create_school(
        self,
        caller: Caller,
        request: SchoolCreateRequest,
    ) -> School:
        """Create a new school.

        Args:
            caller: Resolved caller.
            request: School creation request.

        Returns:
            Created school.

        Raises:
            PermissionDeniedError: If the caller is not a super admin.
        """
        can_manage_schools(caller).enforce()

        school = School(
            name=request.name.strip(),
            address=request.address,
            contact_email=request.contact_email,
            created_by=caller.principal_id,
        )

        self._db.add(school)
        await self._db.commit()
        await self._db.refresh(school)

        logger.info("School created: %s (%s)", school.id, school.name)
        return school

    async def list_schools(
        self,
        caller: Caller,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[School], int]:
        """List schools ordered by name.

        Super admins see every school; other principals see only their own.

        Args:
            caller: Resolved caller.
            limit: Maximum results.
            offset: Pagination offset.

        Returns:
            Tuple of (schools, total count).
        """
        stmt = select(School)
        if caller.role != Role.SUPER_ADMIN:
            if caller.school_id is None:
                return [], 0
            stmt = stmt.where(School.id == caller.school_id)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        count_result = await self._db.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = stmt.order_by(School.name.asc()).limit(limit).offset(offset)
        result = await self._db.execute(stmt)

        return list(result.scalars().all()), total

    async def get_school(self, caller: Caller, school_id: str) -> School:
        """Get a school by ID.

        Raises:
            PermissionDeniedError: If the caller is not a member of the school.
            SchoolNotFoundError: If school not found.
        """
        can_view_school(caller, school_id).enforce()
        return await self.require_school(school_id)

    async def update_school(
        self,
        caller: Caller,
        school_id: str,
        request: SchoolUpdateRequest,
    ) -> School:
        """Update a school. Omitted fields are left unchanged.

        Raises:
            PermissionDeniedError: If the caller is not a super admin.
            SchoolNotFoundError: If school not found.
        """
        can_manage_schools(caller).enforce()
        school = await self.require_school(school_id)

        if request.name is not None:
            school.name = request.name.strip()
        if request.address is not None:
            school.address = request.address
        if request.contact_email is not None:
            school.contact_email = request.contact_email

        await self._db.commit()
        await self._db.refresh(school)

        logger.info("School updated: %s", school.id)
        return school

    async def list_teachers(
        self,
        caller: Caller,
        school_id: str,
    ) -> tuple[list[Principal], int]:
        """List a school's teachers ordered by email.

        Raises:
            PermissionDeniedError: If the caller cannot see the school's staff.
            SchoolNotFoundError: If school not found.
        """
        can_list_school_staff(caller, school_id).enforce()
        await self.require_school(school_id)
        return await DirectoryService(self._db).list_teachers(school_id)

    async def require_school(self, school_id: str) -> School:
        """Get a school or raise.

        Raises:
            SchoolNotFoundError: If school not found.
        """
        result = await self._db.execute(select(School).where(School.id == school_id))
        school = result.scalar_one_or_none()
        if school is None:
            raise SchoolNotFoundError(f"School {school_id} not found")
        return school
