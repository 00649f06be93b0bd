# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for StudentService."""

from datetime import date
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.orm.exc import StaleDataError

from conftest import make_result
from src.core.config import ProgramSettings
from src.core.errors import InvalidArgumentError, PermissionDeniedError
from src.domains.auth.policy import Caller
from src.domains.student.service import (
    ConcurrentUpdateError,
    StudentNotFoundError,
    StudentSchoolNotFoundError,
    StudentService,
)
from src.infrastructure.database.models.school import School
from src.infrastructure.database.models.student import Student
from src.models.student import StudentCreateRequest, StudentUpdateRequest


def make_student(school_id: str, **kwargs) -> Student:
    return Student(
        id=str(uuid4()),
        school_id=school_id,
        name=kwargs.pop("name", "Avery Chen"),
        current_level=kwargs.pop("current_level", 2),
        days_in_current_level=kwargs.pop("days_in_current_level", 4),
        total_discipline_days_lost=0,
    )


class TestCreateStudent:
    """Tests for create_student()."""

    @pytest.mark.asyncio
    async def test_starts_at_initial_state(
        self, mock_db: AsyncMock, school_admin: Caller, school_id: str
    ) -> None:
        """Test that a new student is enrolled at level 1 with zero days."""
        mock_db.get.return_value = School(id=school_id, name="Lincoln Middle")
        request = StudentCreateRequest(
            school_id=school_id,
            name=" Avery Chen ",
            student_number="S-42",
            program_start_date=date(2025, 9, 2),
        )

        student = await StudentService(mock_db).create_student(school_admin, request)

        assert student.name == "Avery Chen"
        assert (student.current_level, student.days_in_current_level) == (1, 0)
        assert student.total_discipline_days_lost == 0
        assert student.program_start_date == date(2025, 9, 2)
        assert student.created_by == school_admin.principal_id
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_teacher_cannot_enroll(
        self, mock_db: AsyncMock, teacher: Caller, school_id: str
    ) -> None:
        with pytest.raises(PermissionDeniedError):
            await StudentService(mock_db).create_student(
                teacher, StudentCreateRequest(school_id=school_id, name="Avery")
            )

    @pytest.mark.asyncio
    async def test_missing_school(
        self, mock_db: AsyncMock, super_admin: Caller, school_id: str
    ) -> None:
        mock_db.get.return_value = None

        with pytest.raises(StudentSchoolNotFoundError):
            await StudentService(mock_db).create_student(
                super_admin, StudentCreateRequest(school_id=school_id, name="Avery")
            )

        mock_db.add.assert_not_called()


class TestReadStudents:
    """Tests for get_student() and list_students()."""

    @pytest.mark.asyncio
    async def test_teacher_reads_own_school(
        self, mock_db: AsyncMock, teacher: Caller, school_id: str
    ) -> None:
        student = make_student(school_id)
        mock_db.execute.return_value = make_result(scalar_one_or_none=student)

        assert await StudentService(mock_db).get_student(teacher, student.id) is student

    @pytest.mark.asyncio
    async def test_other_school_denied(
        self, mock_db: AsyncMock, teacher: Caller, other_school_id: str
    ) -> None:
        student = make_student(other_school_id)
        mock_db.execute.return_value = make_result(scalar_one_or_none=student)

        with pytest.raises(PermissionDeniedError):
            await StudentService(mock_db).get_student(teacher, student.id)

    @pytest.mark.asyncio
    async def test_missing_student(self, mock_db: AsyncMock, teacher: Caller) -> None:
        mock_db.execute.return_value = make_result(scalar_one_or_none=None)

        with pytest.raises(StudentNotFoundError):
            await StudentService(mock_db).get_student(teacher, "missing")

    @pytest.mark.asyncio
    async def test_list_defaults_to_caller_school(
        self, mock_db: AsyncMock, teacher: Caller, school_id: str
    ) -> None:
        students = [make_student(school_id, name="A"), make_student(school_id, name="B")]
        mock_db.execute.side_effect = [make_result(scalar=2), make_result(scalars=students)]

        result, total = await StudentService(mock_db).list_students(teacher)

        assert result == students
        assert total == 2

    @pytest.mark.asyncio
    async def test_super_admin_must_name_school(
        self, mock_db: AsyncMock, super_admin: Caller
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            await StudentService(mock_db).list_students(super_admin)


class TestUpdateStudent:
    """Tests for update_student()."""

    @pytest.mark.asyncio
    async def test_edit_leaves_progress_alone(
        self, mock_db: AsyncMock, school_admin: Caller, school_id: str
    ) -> None:
        student = make_student(school_id, current_level=3, days_in_current_level=7)
        mock_db.execute.return_value = make_result(scalar_one_or_none=student)

        updated = await StudentService(mock_db).update_student(
            school_admin,
            student.id,
            StudentUpdateRequest(name="Avery C.", total_discipline_days_lost=2),
        )

        assert updated.name == "Avery C."
        assert updated.total_discipline_days_lost == 2
        assert (updated.current_level, updated.days_in_current_level) == (3, 7)

    @pytest.mark.asyncio
    async def test_concurrent_point_sheet_is_overwritten(
        self, mock_db: AsyncMock, school_admin: Caller, school_id: str
    ) -> None:
        """Test that an edit losing a race is reapplied to the fresh row."""
        stale = make_student(school_id, days_in_current_level=4)
        fresh = make_student(school_id, days_in_current_level=5)
        fresh.id = stale.id
        mock_db.execute.side_effect = [
            make_result(scalar_one_or_none=stale),
            make_result(scalar_one_or_none=fresh),
        ]
        mock_db.commit.side_effect = [StaleDataError("version mismatch"), None]

        updated = await StudentService(mock_db).update_student(
            school_admin, stale.id, StudentUpdateRequest(name="New Name")
        )

        assert updated is fresh
        assert updated.name == "New Name"
        assert updated.days_in_current_level == 5
        assert mock_db.commit.await_count == 2
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(
        self, mock_db: AsyncMock, school_admin: Caller, school_id: str
    ) -> None:
        student = make_student(school_id)
        mock_db.execute.return_value = make_result(scalar_one_or_none=student)
        mock_db.commit.side_effect = StaleDataError("version mismatch")

        with pytest.raises(ConcurrentUpdateError):
            await StudentService(mock_db, ProgramSettings(max_attempts=2)).update_student(
                school_admin, student.id, StudentUpdateRequest(name="New Name")
            )

        assert mock_db.commit.await_count == 2
        assert mock_db.rollback.await_count == 2
