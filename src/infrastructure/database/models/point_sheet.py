# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Daily point-sheet report model.

Reports form the audit log of the program. Rows are append-only: the
mapper refuses to flush an UPDATE or DELETE for them.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
    event,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, UUIDPrimaryKeyMixin


class ImmutableRecordError(RuntimeError):
    """Raised when code tries to change or remove an audit record."""


class PointSheetReport(UUIDPrimaryKeyMixin, Base):
    """One submitted daily point sheet and its computed outcome."""

    __tablename__ = "point_sheet_reports"
    __table_args__ = (
        Index("ix_point_sheet_reports_student_id_created_at", "student_id", "created_at"),
        Index("ix_point_sheet_reports_school_id", "school_id"),
    )

    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("students.id", ondelete="RESTRICT"),
        nullable=False,
    )
    school_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("schools.id", ondelete="RESTRICT"),
        nullable=False,
    )
    teacher_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    teacher_email: Mapped[str] = mapped_column(String(255), nullable=False)

    # [{"period": 1, "respect": 2, "integrity": 1, "self": 2, "excellence": -1, "notes": ""}, ...]
    period_scores: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    is_absent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    total_earned_points: Mapped[int] = mapped_column(Integer, nullable=False)
    total_possible_points: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    is_successful_day: Mapped[bool] = mapped_column(Boolean, nullable=False)

    level_at_time_of_report: Mapped[int] = mapped_column(Integer, nullable=False)
    level_after_report: Mapped[int] = mapped_column(Integer, nullable=False)
    days_after_report: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return (
            f"<PointSheetReport {self.id} student={self.student_id} "
            f"pct={self.daily_percentage:.1f}>"
        )


@event.listens_for(PointSheetReport, "before_update")
def _reject_report_update(mapper, connection, target: PointSheetReport) -> None:
    raise ImmutableRecordError(f"Point sheet report {target.id} cannot be modified")


@event.listens_for(PointSheetReport, "before_delete")
def _reject_report_delete(mapper, connection, target: PointSheetReport) -> None:
    raise ImmutableRecordError(f"Point sheet report {target.id} cannot be deleted")
