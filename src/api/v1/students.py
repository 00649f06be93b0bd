# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student roster and point-sheet API endpoints.

This module provides endpoints for students:
- POST / - Enroll a student
- GET / - List a school's students
- GET /{student_id} - Get student details
- PUT /{student_id} - Administrative edit
- POST /{student_id}/point-sheets - Submit a daily point sheet
- GET /{student_id}/point-sheets - A student's report history

Example:
    POST /api/v1/students/{student_id}/point-sheets
    {
        "is_absent": false,
        "periods": [
            {"period": 1, "respect": 2, "integrity": 2, "self": 1, "excellence": 2},
            ...
        ]
    }
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.api.dependencies import AppSettings, CurrentCaller, DbSession
from src.domains.point_sheet.service import PointSheetService
from src.domains.student.service import StudentService
from src.models.point_sheet import (
    PointSheetHistoryResponse,
    PointSheetReportResponse,
    PointSheetSubmitRequest,
    PointSheetSubmitResponse,
)
from src.models.student import (
    StudentCreateRequest,
    StudentListResponse,
    StudentResponse,
    StudentUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create student",
    description="Enroll a student at level 1. Requires super admin or the school's admin.",
)
async def create_student(
    data: StudentCreateRequest,
    caller: CurrentCaller,
    db: DbSession,
) -> StudentResponse:
    """Enroll a new student."""
    student = await StudentService(db).create_student(caller, data)
    return StudentResponse.model_validate(student)


@router.get(
    "",
    response_model=StudentListResponse,
    summary="List students",
    description="List a school's students; defaults to the caller's school.",
)
async def list_students(
    caller: CurrentCaller,
    db: DbSession,
    school_id: UUID | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> StudentListResponse:
    """List students ordered by name."""
    students, total = await StudentService(db).list_students(
        caller,
        school_id=str(school_id) if school_id else None,
        limit=limit,
        offset=offset,
    )
    return StudentListResponse(
        items=[StudentResponse.model_validate(student) for student in students],
        total=total,
    )


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    summary="Get student",
)
async def get_student(
    student_id: UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> StudentResponse:
    """Get a student by id."""
    student = await StudentService(db).get_student(caller, str(student_id))
    return StudentResponse.model_validate(student)


@router.put(
    "/{student_id}",
    response_model=StudentResponse,
    summary="Update student",
    description="Edit roster details. Level and day counters are not editable.",
)
async def update_student(
    student_id: UUID,
    data: StudentUpdateRequest,
    caller: CurrentCaller,
    db: DbSession,
    settings: AppSettings,
) -> StudentResponse:
    """Apply an administrative edit to a student."""
    service = StudentService(db, settings.program)
    student = await service.update_student(caller, str(student_id), data)
    return StudentResponse.model_validate(student)


@router.post(
    "/{student_id}/point-sheets",
    response_model=PointSheetSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit point sheet",
    description="Score a daily point sheet and advance the student's progress.",
)
async def submit_point_sheet(
    student_id: UUID,
    data: PointSheetSubmitRequest,
    caller: CurrentCaller,
    db: DbSession,
    settings: AppSettings,
) -> PointSheetSubmitResponse:
    """Process a daily point sheet for a student.

    Args:
        student_id: Student the sheet is about.
        data: Period scores and absence flag.
        caller: Resolved caller.
        db: Database session.
        settings: Application settings.

    Returns:
        The score, the success decision and the student's new position.
    """
    service = PointSheetService(db, settings.program)
    outcome = await service.submit(
        caller,
        str(student_id),
        [period.as_scores() for period in data.periods],
        is_absent=data.is_absent,
    )
    return PointSheetSubmitResponse(
        message=outcome.message,
        report_id=outcome.report.id,
        daily_percentage=outcome.score.percentage,
        is_successful_day=outcome.success,
        new_level=outcome.transition.state.level,
        new_days_in_current_level=outcome.transition.state.days_in_level,
        level_advanced=outcome.transition.level_advanced,
        program_completed=outcome.transition.program_completed,
    )


@router.get(
    "/{student_id}/point-sheets",
    response_model=PointSheetHistoryResponse,
    summary="List point sheets",
    description="A student's reports, newest first.",
)
async def list_point_sheets(
    student_id: UUID,
    caller: CurrentCaller,
    db: DbSession,
    settings: AppSettings,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> PointSheetHistoryResponse:
    """List a student's point-sheet reports."""
    service = PointSheetService(db, settings.program)
    reports, total = await service.list_reports(
        caller, str(student_id), limit=limit, offset=offset
    )
    return PointSheetHistoryResponse(
        items=[PointSheetReportResponse.model_validate(report) for report in reports],
        total=total,
    )
