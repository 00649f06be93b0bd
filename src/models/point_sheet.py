# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Point-sheet API models.

Scores are plain integers here. Range and shape checks live in the
scoring module so that every caller gets the same rules and messages.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PeriodScores(BaseModel):
    """RISE ratings for one period.

    The attribute is ``self_``; the wire name stays ``self``.
    """

    model_config = ConfigDict(populate_by_name=True)

    period: int = Field(description="Period number, 1-6")
    respect: int = Field(description="0-2, or -1 for not applicable")
    integrity: int = Field(description="0-2, or -1 for not applicable")
    self_: int = Field(alias="self", description="0-2, or -1 for not applicable")
    excellence: int = Field(description="0-2, or -1 for not applicable")
    notes: str = Field(default="", max_length=2000)

    def as_scores(self) -> dict[str, Any]:
        """Return the period keyed by category name, notes included."""
        return self.model_dump(by_alias=True)


class PointSheetSubmitRequest(BaseModel):
    """A daily point sheet for one student."""

    periods: list[PeriodScores] = Field(default_factory=list)
    is_absent: bool = False


class PointSheetSubmitResponse(BaseModel):
    """Outcome of processing a point sheet."""

    message: str
    report_id: str
    daily_percentage: float
    is_successful_day: bool
    new_level: int
    new_days_in_current_level: int
    level_advanced: bool = False
    program_completed: bool = False


class PointSheetReportResponse(BaseModel):
    """A stored report from a student's history."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    school_id: str
    teacher_id: str
    teacher_email: str
    period_scores: list[dict[str, Any]]
    is_absent: bool
    total_earned_points: int
    total_possible_points: int
    daily_percentage: float
    is_successful_day: bool
    level_at_time_of_report: int
    level_after_report: int
    days_after_report: int
    created_at: datetime | None = None


class PointSheetHistoryResponse(BaseModel):
    """A student's reports, newest first."""

    items: list[PointSheetReportResponse]
    total: int
