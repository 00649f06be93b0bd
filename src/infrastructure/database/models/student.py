# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student and class models."""

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

class_students = Table(
    "class_students",
    Base.metadata,
    Column(
        "class_id",
        Uuid(as_uuid=False),
        ForeignKey("classes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "student_id",
        Uuid(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Student(UUIDPrimaryKeyMixin, Base):
    """A student enrolled in the behavior program.

    ``version`` is bumped on every flush. A point-sheet submission that
    read an older version fails with StaleDataError instead of
    overwriting a concurrent submission.
    """

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("current_level BETWEEN 1 AND 4", name="level_range"),
        CheckConstraint("days_in_current_level >= 0", name="days_non_negative"),
        CheckConstraint("total_discipline_days_lost >= 0", name="discipline_non_negative"),
    )

    school_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("schools.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    student_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    current_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    days_in_current_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_discipline_days_lost: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    program_start_date: Mapped[date] = mapped_column(
        Date, nullable=False, server_default=func.current_date()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    created_by: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Student {self.id} level={self.current_level} days={self.days_in_current_level}>"


class ClassRoom(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A teacher-owned group of students from the teacher's school."""

    __tablename__ = "classes"

    school_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("schools.id", ondelete="RESTRICT"),
        nullable=False,
    )
    teacher_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("principals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    students: Mapped[list[Student]] = relationship(
        secondary=class_students,
        lazy="selectin",
        order_by=Student.name,
    )

    @property
    def student_ids(self) -> list[str]:
        """Member student ids in name order."""
        return [student.id for student in self.students]

    def __repr__(self) -> str:
        return f"<ClassRoom {self.id} {self.name!r}>"
