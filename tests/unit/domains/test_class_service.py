# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for ClassService."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from conftest import make_result
from src.core.errors import PermissionDeniedError
from src.domains.auth.policy import Caller
from src.domains.class_.service import ClassMemberSchoolError, ClassNotFoundError, ClassService
from src.domains.student.service import StudentNotFoundError
from src.infrastructure.database.models.student import ClassRoom, Student
from src.models.class_ import ClassCreateRequest, ClassUpdateRequest


def make_student(school_id: str, name: str = "Riley") -> Student:
    return Student(
        id=str(uuid4()),
        school_id=school_id,
        name=name,
        current_level=1,
        days_in_current_level=0,
        total_discipline_days_lost=0,
    )


def make_class(teacher: Caller, students: list[Student] | None = None) -> ClassRoom:
    return ClassRoom(
        id=str(uuid4()),
        school_id=teacher.school_id,
        teacher_id=teacher.principal_id,
        name="Period 2 Math",
        students=students or [],
    )


class TestCreateClass:
    """Tests for create_class()."""

    @pytest.mark.asyncio
    async def test_teacher_creates_with_members(
        self, mock_db: AsyncMock, teacher: Caller, school_id: str
    ) -> None:
        """Test that initial members are moved out of the teacher's other classes."""
        first = make_student(school_id, "A")
        second = make_student(school_id, "B")
        mock_db.execute.side_effect = [
            make_result(scalar_one_or_none=first),
            make_result(scalar_one_or_none=second),
            make_result(rowcount=1),
            make_result(rowcount=0),
        ]

        class_ = await ClassService(mock_db).create_class(
            teacher,
            ClassCreateRequest(name=" Homeroom ", student_ids=[first.id, second.id, first.id]),
        )

        assert class_.name == "Homeroom"
        assert class_.teacher_id == teacher.principal_id
        assert class_.school_id == school_id
        assert class_.student_ids == [first.id, second.id]
        assert mock_db.execute.await_count == 4
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_school_admin_denied(self, mock_db: AsyncMock, school_admin: Caller) -> None:
        with pytest.raises(PermissionDeniedError):
            await ClassService(mock_db).create_class(
                school_admin, ClassCreateRequest(name="Homeroom")
            )

    @pytest.mark.asyncio
    async def test_student_from_other_school(
        self, mock_db: AsyncMock, teacher: Caller, other_school_id: str
    ) -> None:
        outsider = make_student(other_school_id)
        mock_db.execute.return_value = make_result(scalar_one_or_none=outsider)

        with pytest.raises(ClassMemberSchoolError):
            await ClassService(mock_db).create_class(
                teacher, ClassCreateRequest(name="Homeroom", student_ids=[outsider.id])
            )

        mock_db.add.assert_not_called()


class TestClassOwnership:
    """Tests for reads and edits of a single class."""

    @pytest.mark.asyncio
    async def test_missing_class(self, mock_db: AsyncMock, teacher: Caller) -> None:
        mock_db.execute.return_value = make_result(scalar_one_or_none=None)

        with pytest.raises(ClassNotFoundError):
            await ClassService(mock_db).get_class(teacher, "missing")

    @pytest.mark.asyncio
    async def test_other_teachers_class(
        self, mock_db: AsyncMock, teacher: Caller, school_id: str
    ) -> None:
        """Test that a teacher cannot touch a colleague's class."""
        colleague = Caller(principal_id=str(uuid4()), role=teacher.role, school_id=school_id)
        mock_db.execute.return_value = make_result(scalar_one_or_none=make_class(colleague))

        with pytest.raises(PermissionDeniedError) as exc_info:
            await ClassService(mock_db).update_class(
                teacher, "c-1", ClassUpdateRequest(name="Mine now")
            )

        assert exc_info.value.message == "You can only manage your own classes."
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rename(self, mock_db: AsyncMock, teacher: Caller) -> None:
        class_ = make_class(teacher)
        mock_db.execute.return_value = make_result(scalar_one_or_none=class_)

        updated = await ClassService(mock_db).update_class(
            teacher, class_.id, ClassUpdateRequest(name="Period 3 Math")
        )

        assert updated.name == "Period 3 Math"

    @pytest.mark.asyncio
    async def test_delete(self, mock_db: AsyncMock, teacher: Caller) -> None:
        class_ = make_class(teacher)
        mock_db.execute.return_value = make_result(scalar_one_or_none=class_)

        await ClassService(mock_db).delete_class(teacher, class_.id)

        mock_db.delete.assert_awaited_once_with(class_)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_own_classes(self, mock_db: AsyncMock, teacher: Caller) -> None:
        classes = [make_class(teacher), make_class(teacher)]
        mock_db.execute.return_value = make_result(scalars=classes)

        result, total = await ClassService(mock_db).list_classes(teacher)

        assert result == classes
        assert total == 2


class TestMembership:
    """Tests for add_student() and remove_student()."""

    @pytest.mark.asyncio
    async def test_add_student(self, mock_db: AsyncMock, teacher: Caller, school_id: str) -> None:
        class_ = make_class(teacher)
        student = make_student(school_id)
        mock_db.execute.side_effect = [
            make_result(scalar_one_or_none=class_),
            make_result(scalar_one_or_none=student),
            make_result(rowcount=1),
        ]

        result = await ClassService(mock_db).add_student(teacher, class_.id, student.id)

        assert result.student_ids == [student.id]

    @pytest.mark.asyncio
    async def test_add_existing_member_is_noop(
        self, mock_db: AsyncMock, teacher: Caller, school_id: str
    ) -> None:
        student = make_student(school_id)
        class_ = make_class(teacher, [student])
        mock_db.execute.side_effect = [
            make_result(scalar_one_or_none=class_),
            make_result(scalar_one_or_none=student),
            make_result(rowcount=0),
        ]

        result = await ClassService(mock_db).add_student(teacher, class_.id, student.id)

        assert result.student_ids == [student.id]

    @pytest.mark.asyncio
    async def test_add_unknown_student(self, mock_db: AsyncMock, teacher: Caller) -> None:
        mock_db.execute.side_effect = [
            make_result(scalar_one_or_none=make_class(teacher)),
            make_result(scalar_one_or_none=None),
        ]

        with pytest.raises(StudentNotFoundError):
            await ClassService(mock_db).add_student(teacher, "c-1", "missing")

    @pytest.mark.asyncio
    async def test_remove_student(
        self, mock_db: AsyncMock, teacher: Caller, school_id: str
    ) -> None:
        student = make_student(school_id)
        class_ = make_class(teacher, [student])
        mock_db.execute.return_value = make_result(scalar_one_or_none=class_)

        result = await ClassService(mock_db).remove_student(teacher, class_.id, student.id)

        assert result.student_ids == []

    @pytest.mark.asyncio
    async def test_remove_non_member(self, mock_db: AsyncMock, teacher: Caller) -> None:
        mock_db.execute.return_value = make_result(scalar_one_or_none=make_class(teacher))

        with pytest.raises(StudentNotFoundError):
            await ClassService(mock_db).remove_student(teacher, "c-1", "nobody")
