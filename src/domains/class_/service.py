# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class service for teacher-owned student groups.

This module provides the ClassService class for:
- Class CRUD operations for the owning teacher
- Adding and removing member students

A student sits in at most one class of a given teacher. Adding a student
to a class moves them out of that teacher's other classes; classes owned
by other teachers are not touched.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import NotFoundError, PermissionDeniedError
from src.domains.auth.policy import Caller, can_manage_classes, can_modify_class
from src.domains.student.service import StudentNotFoundError
from src.infrastructure.database.models.base import new_id
from src.infrastructure.database.models.student import ClassRoom, Student, class_students
from src.models.class_ import ClassCreateRequest, ClassUpdateRequest

logger = logging.getLogger(__name__)


class ClassNotFoundError(NotFoundError):
    """Raised when class is not found."""


class ClassMemberSchoolError(PermissionDeniedError):
    """Raised when adding a student from another school."""


class ClassService:
    """Service for managing classes.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize class service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def create_class(
        self,
        caller: Caller,
        request: ClassCreateRequest,
    ) -> ClassRoom:
        """Create a class owned by the calling teacher.

        Args:
            caller: Resolved caller, must be a teacher.
            request: Class creation data, optionally with initial members.

        Returns:
            Created class.

        Raises:
            PermissionDeniedError: If the caller is not a teacher.
            StudentNotFoundError: If an initial member does not exist.
            ClassMemberSchoolError: If an initial member is from another school.
        """
        can_manage_classes(caller).enforce()

        students = [
            await self._get_member_candidate(caller, student_id)
            for student_id in dict.fromkeys(request.student_ids)
        ]

        class_id = new_id()
        for student in students:
            await self._detach_from_other_classes(caller, class_id, student.id)

        class_ = ClassRoom(
            id=class_id,
            school_id=caller.school_id,
            teacher_id=caller.principal_id,
            name=request.name.strip(),
            students=students,
        )
        self.db.add(class_)

        await self.db.commit()
        await self.db.refresh(class_)

        logger.info(
            "Created class: %s (%s) by %s with %d students",
            class_.name, class_.id, caller.principal_id, len(students),
        )
        return class_

    async def list_classes(self, caller: Caller) -> tuple[list[ClassRoom], int]:
        """List the calling teacher's classes ordered by name.

        Raises:
            PermissionDeniedError: If the caller is not a teacher.
        """
        can_manage_classes(caller).enforce()

        result = await self.db.execute(
            select(ClassRoom)
            .where(ClassRoom.teacher_id == caller.principal_id)
            .order_by(ClassRoom.name.asc())
        )
        classes = list(result.scalars().all())
        return classes, len(classes)

    async def get_class(self, caller: Caller, class_id: str) -> ClassRoom:
        """Get one of the caller's classes.

        Raises:
            ClassNotFoundError: If class not found.
            PermissionDeniedError: If the caller does not own the class.
        """
        class_ = await self._get_by_id(class_id)
        if class_ is None:
            raise ClassNotFoundError(f"Class {class_id} not found")

        can_modify_class(caller, class_.teacher_id).enforce()
        return class_

    async def update_class(
        self,
        caller: Caller,
        class_id: str,
        request: ClassUpdateRequest,
    ) -> ClassRoom:
        """Rename a class.

        Raises:
            ClassNotFoundError: If class not found.
            PermissionDeniedError: If the caller does not own the class.
        """
        class_ = await self.get_class(caller, class_id)
        class_.name = request.name.strip()

        await self.db.commit()
        await self.db.refresh(class_)

        logger.info("Updated class: %s", class_.id)
        return class_

    async def delete_class(self, caller: Caller, class_id: str) -> None:
        """Delete a class. Member students are not affected.

        Raises:
            ClassNotFoundError: If class not found.
            PermissionDeniedError: If the caller does not own the class.
        """
        class_ = await self.get_class(caller, class_id)

        await self.db.delete(class_)
        await self.db.commit()

        logger.info("Deleted class: %s by %s", class_id, caller.principal_id)

    async def add_student(
        self,
        caller: Caller,
        class_id: str,
        student_id: str,
    ) -> ClassRoom:
        """Add a student, moving them out of the teacher's other classes.

        Raises:
            ClassNotFoundError: If class not found.
            PermissionDeniedError: If the caller does not own the class.
            StudentNotFoundError: If the student does not exist.
            ClassMemberSchoolError: If the student is from another school.
        """
        class_ = await self.get_class(caller, class_id)
        student = await self._get_member_candidate(caller, student_id)

        await self._detach_from_other_classes(caller, class_.id, student.id)
        if student.id not in class_.student_ids:
            class_.students.append(student)

        await self.db.commit()
        await self.db.refresh(class_)

        logger.info("Student %s added to class %s", student.id, class_.id)
        return class_

    async def remove_student(
        self,
        caller: Caller,
        class_id: str,
        student_id: str,
    ) -> ClassRoom:
        """Remove a student from a class.

        Raises:
            ClassNotFoundError: If class not found.
            PermissionDeniedError: If the caller does not own the class.
            StudentNotFoundError: If the student is not a member.
        """
        class_ = await self.get_class(caller, class_id)

        member = next((s for s in class_.students if s.id == student_id), None)
        if member is None:
            raise StudentNotFoundError(f"Student {student_id} is not in class {class_id}")

        class_.students.remove(member)
        await self.db.commit()
        await self.db.refresh(class_)

        logger.info("Student %s removed from class %s", student_id, class_.id)
        return class_

    async def _get_by_id(self, class_id: str) -> ClassRoom | None:
        result = await self.db.execute(select(ClassRoom).where(ClassRoom.id == class_id))
        return result.scalar_one_or_none()

    async def _get_member_candidate(self, caller: Caller, student_id: str) -> Student:
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if student is None:
            raise StudentNotFoundError(f"Student {student_id} not found.")
        if student.school_id != caller.school_id:
            raise ClassMemberSchoolError("Student does not belong to your school.")
        return student

    async def _detach_from_other_classes(
        self,
        caller: Caller,
        class_id: str,
        student_id: str,
    ) -> None:
        other_classes = select(ClassRoom.id).where(
            ClassRoom.teacher_id == caller.principal_id,
            ClassRoom.id != class_id,
        )
        result = await self.db.execute(
            delete(class_students).where(
                class_students.c.student_id == student_id,
                class_students.c.class_id.in_(other_classes),
            )
        )
        if result.rowcount:
            logger.info(
                "Student %s moved out of %d other class(es) of teacher %s",
                student_id, result.rowcount, caller.principal_id,
            )
