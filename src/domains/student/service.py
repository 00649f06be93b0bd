# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student roster service.

This module provides the StudentService that handles:
- Enrolling students in a school at the program's initial position
- Administrative edits (name, number, discipline days, start date)
- Scoped reads and name-ordered listings

Level and day counters are never written here; only point-sheet
processing moves a student through the program.

Example:
    >>> service = StudentService(db_session)
    >>> student = await service.create_student(caller, request)
    >>> students, total = await service.list_students(caller, school_id)
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from src.core.config.settings import ProgramSettings
from src.core.errors import InternalError, InvalidArgumentError, NotFoundError
from src.domains.auth.policy import Caller, can_manage_students, can_view_students
from src.domains.progression import INITIAL_STATE
from src.infrastructure.database.models.school import School
from src.infrastructure.database.models.student import Student
from src.models.student import StudentCreateRequest, StudentUpdateRequest

logger = logging.getLogger(__name__)


class StudentNotFoundError(NotFoundError):
    """Raised when a student is not found."""


class StudentSchoolNotFoundError(NotFoundError):
    """Raised when enrolling a student in a school that does not exist."""


class ConcurrentUpdateError(InternalError):
    """Raised when a student changed underneath a write and retrying did not help."""


class StudentService:
    """Service for managing students.

    Attributes:
        _db: Async database session.
        _settings: Program settings.
    """

    def __init__(self, db: AsyncSession, settings: ProgramSettings | None = None) -> None:
        """Initialize the student service.

        Args:
            db: Async database session.
            settings: Program settings; ``max_attempts`` bounds edit retries.
        """
        self._db = db
        self._settings = settings or ProgramSettings()

    async def create_student(
        self,
        caller: Caller,
        request: StudentCreateRequest,
    ) -> Student:
        """Enroll a new student at level 1 with no days accumulated.

        Args:
            caller: Resolved caller.
            request: Student creation request.

        Returns:
            Created student.

        Raises:
            PermissionDeniedError: If the caller cannot manage the school.
            StudentSchoolNotFoundError: If the school does not exist.
        """
        can_manage_students(caller, request.school_id).enforce()

        school = await self._db.get(School, request.school_id)
        if school is None:
            raise StudentSchoolNotFoundError(f"School {request.school_id} not found")

        student = Student(
            school_id=request.school_id,
            name=request.name.strip(),
            student_number=request.student_number,
            current_level=INITIAL_STATE.level,
            days_in_current_level=INITIAL_STATE.days_in_level,
            total_discipline_days_lost=0,
            created_by=caller.principal_id,
        )
        if request.program_start_date is not None:
            student.program_start_date = request.program_start_date

        self._db.add(student)
        await self._db.commit()
        await self._db.refresh(student)

        logger.info(
            "Student created: %s (school=%s, by=%s)",
            student.id, student.school_id, caller.principal_id,
        )
        return student

    async def get_student(self, caller: Caller, student_id: str) -> Student:
        """Get a student the caller may see.

        Raises:
            StudentNotFoundError: If the student does not exist.
            PermissionDeniedError: If the student is outside the caller's school.
        """
        student = await self._get_by_id(student_id)
        if student is None:
            raise StudentNotFoundError(f"Student {student_id} not found.")

        can_view_students(caller, student.school_id).enforce()
        return student

    async def list_students(
        self,
        caller: Caller,
        school_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Student], int]:
        """List a school's students ordered by name.

        Args:
            caller: Resolved caller.
            school_id: School to list; defaults to the caller's school.
            limit: Maximum results.
            offset: Pagination offset.

        Returns:
            Tuple of (students, total count).

        Raises:
            InvalidArgumentError: If no school is given and the caller has none.
            PermissionDeniedError: If the caller cannot see the school.
        """
        school_id = school_id or caller.school_id
        if school_id is None:
            raise InvalidArgumentError("school_id is required")
        can_view_students(caller, school_id).enforce()

        count_result = await self._db.execute(
            select(func.count()).select_from(Student).where(Student.school_id == school_id)
        )
        total = count_result.scalar() or 0

        result = await self._db.execute(
            select(Student)
            .where(Student.school_id == school_id)
            .order_by(Student.name.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total

    async def update_student(
        self,
        caller: Caller,
        student_id: str,
        request: StudentUpdateRequest,
    ) -> Student:
        """Apply an administrative edit. Last write wins.

        When a point sheet for the same student commits between the read
        and the write, the edit is reapplied to the fresh row so the
        submitted fields overwrite whatever was there while progress
        counters keep the concurrent result.

        Raises:
            StudentNotFoundError: If the student does not exist.
            PermissionDeniedError: If the caller cannot manage the school.
            ConcurrentUpdateError: If concurrent writes kept winning.
        """
        max_attempts = self._settings.max_attempts

        for attempt in range(1, max_attempts + 1):
            student = await self._get_by_id(student_id, fresh=attempt > 1)
            if student is None:
                raise StudentNotFoundError(f"Student {student_id} not found.")

            can_manage_students(caller, student.school_id).enforce()
            self._apply_edit(student, request)

            try:
                await self._db.commit()
            except StaleDataError:
                await self._db.rollback()
                logger.warning(
                    "Concurrent update of student %s (attempt %d/%d)",
                    student_id, attempt, max_attempts,
                )
                continue

            await self._db.refresh(student)
            logger.info("Student updated: %s (by=%s)", student.id, caller.principal_id)
            return student

        logger.error(
            "Giving up on update of student %s after %d attempts", student_id, max_attempts
        )
        raise ConcurrentUpdateError(
            "The student was updated by another request. Please retry."
        )

    @staticmethod
    def _apply_edit(student: Student, request: StudentUpdateRequest) -> None:
        if request.name is not None:
            student.name = request.name.strip()
        if request.student_number is not None:
            student.student_number = request.student_number
        if request.total_discipline_days_lost is not None:
            student.total_discipline_days_lost = request.total_discipline_days_lost
        if request.program_start_date is not None:
            student.program_start_date = request.program_start_date

    async def _get_by_id(self, student_id: str, fresh: bool = False) -> Student | None:
        query = select(Student).where(Student.id == student_id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        result = await self._db.execute(query)
        return result.scalar_one_or_none()
