# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student API models."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import EntityId


class StudentCreateRequest(BaseModel):
    """Request to enroll a student in a school.

    New students always start at level 1 with no days accumulated.
    """

    school_id: EntityId
    name: str = Field(min_length=1, max_length=200)
    student_number: str | None = Field(default=None, max_length=50)
    program_start_date: date | None = None


class StudentUpdateRequest(BaseModel):
    """Administrative edit of a student.

    Level and day counters are owned by point-sheet processing and cannot
    be set here.
    """

    name: str | None = Field(default=None, min_length=1, max_length=200)
    student_number: str | None = Field(default=None, max_length=50)
    total_discipline_days_lost: int | None = Field(default=None, ge=0)
    program_start_date: date | None = None


class StudentResponse(BaseModel):
    """Student details including program position."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    school_id: str
    name: str
    student_number: str | None = None
    current_level: int
    days_in_current_level: int
    total_discipline_days_lost: int
    program_start_date: date | None = None
    last_updated: datetime | None = None
    created_by: str | None = None


class StudentListResponse(BaseModel):
    """Students of a school ordered by name."""

    items: list[StudentResponse]
    total: int
