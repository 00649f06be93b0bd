# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Point-sheet recorder.

This module provides the PointSheetService that processes a teacher's
daily point sheet for one student:

1. Load the student and check the caller may report on them
2. Validate and score the sheet
3. Decide whether the day was successful at the student's level
4. Feed the outcome into the level-progression state machine
5. Write the new student position and the immutable report in one commit

The student row is versioned. When another submission for the same
student commits first, the flush fails with StaleDataError and the whole
read-score-write cycle is repeated against fresh data, up to
``POINT_SHEET_MAX_ATTEMPTS`` times.

Example:
    >>> service = PointSheetService(db_session, settings.program)
    >>> outcome = await service.submit(caller, student_id, periods, is_absent=False)
    >>> outcome.transition.state.level
    2
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from src.core.config.settings import ProgramSettings
from src.core.errors import InvalidArgumentError
from src.domains.auth.policy import Caller, can_submit_point_sheet, can_view_students
from src.domains.point_sheet.scoring import (
    DailyScore,
    compute_daily_score,
    is_successful_day,
    validate_periods,
)
from src.domains.progression import ProgressState, Transition, advance
from src.domains.student.service import ConcurrentUpdateError, StudentNotFoundError
from src.infrastructure.database.models.base import new_id
from src.infrastructure.database.models.point_sheet import PointSheetReport
from src.infrastructure.database.models.student import Student
from src.utils.datetime import utc_day_bounds, utc_now

logger = logging.getLogger(__name__)


class DuplicateDailyReportError(InvalidArgumentError):
    """Raised when a second report for the same day is not allowed."""


@dataclass(frozen=True)
class PointSheetOutcome:
    """Everything the caller needs to know about a processed sheet.

    Attributes:
        report: The stored report.
        score: Daily totals.
        success: Whether the day counted toward the level.
        transition: Progress before and after the report.
    """

    report: PointSheetReport
    score: DailyScore
    success: bool
    transition: Transition

    @property
    def message(self) -> str:
        """Human-readable summary of the outcome."""
        state = self.transition.state
        if self.transition.program_completed:
            return (
                f"Point sheet processed. Student has completed the program "
                f"at Level {state.level}."
            )
        if self.transition.level_advanced:
            return f"Point sheet processed. Student advanced to Level {state.level}!"
        if self.success:
            return (
                f"Point sheet processed. Successful day {state.days_in_level} "
                f"at Level {state.level}."
            )
        return f"Point sheet processed. Day not successful; student remains at Level {state.level}."


class PointSheetService:
    """Service that records daily point sheets.

    Attributes:
        _db: Async database session.
        _settings: Point-sheet processing settings.
    """

    def __init__(self, db: AsyncSession, settings: ProgramSettings | None = None) -> None:
        """Initialize the point-sheet service.

        Args:
            db: Async database session.
            settings: Processing settings, defaults from the environment.
        """
        self._db = db
        self._settings = settings or ProgramSettings()

    async def submit(
        self,
        caller: Caller,
        student_id: str,
        periods: Sequence[Mapping[str, Any]],
        is_absent: bool,
    ) -> PointSheetOutcome:
        """Process one daily point sheet.

        Args:
            caller: Resolved caller submitting the sheet.
            student_id: Student the sheet is about.
            periods: Per-period category scores with optional notes.
            is_absent: Whether the student was absent.

        Returns:
            PointSheetOutcome with the stored report and the transition.

        Raises:
            StudentNotFoundError: If the student does not exist.
            PermissionDeniedError: If the caller may not report on the student.
            InvalidPointSheetError: If the sheet is malformed.
            DuplicateDailyReportError: If same-day reports are disabled and
                the student already has one today.
            ConcurrentUpdateError: If concurrent submissions kept winning.
        """
        max_attempts = self._settings.max_attempts

        for attempt in range(1, max_attempts + 1):
            student = await self._load_student(student_id)
            if student is None:
                raise StudentNotFoundError(f"Student {student_id} not found.")

            can_submit_point_sheet(caller, student.school_id).enforce()
            validate_periods(periods, is_absent)

            if not self._settings.allow_multiple_daily_reports:
                await self._ensure_first_report_today(student.id)

            outcome = self._record(caller, student, periods, is_absent)

            try:
                await self._db.commit()
            except StaleDataError:
                await self._db.rollback()
                logger.warning(
                    "Concurrent point sheet for student %s (attempt %d/%d)",
                    student_id, attempt, max_attempts,
                )
                continue

            self._log_outcome(student_id, outcome)
            return outcome

        logger.error(
            "Giving up on point sheet for student %s after %d attempts",
            student_id, max_attempts,
        )
        raise ConcurrentUpdateError(
            "The student was updated by another submission at the same time. Please retry."
        )

    def _record(
        self,
        caller: Caller,
        student: Student,
        periods: Sequence[Mapping[str, Any]],
        is_absent: bool,
    ) -> PointSheetOutcome:
        """Score the sheet, move the student and stage the report."""
        score = compute_daily_score(periods, is_absent)
        level_at_report = student.current_level
        success = not is_absent and is_successful_day(score.percentage, level_at_report)

        transition = advance(
            ProgressState(level=level_at_report, days_in_level=student.days_in_current_level),
            success,
        )

        student.current_level = transition.state.level
        student.days_in_current_level = transition.state.days_in_level
        # Always dirty the row so every submission goes through the version check
        student.last_updated = utc_now()

        report = PointSheetReport(
            id=new_id(),
            student_id=student.id,
            school_id=student.school_id,
            teacher_id=caller.principal_id,
            teacher_email=caller.email or "",
            period_scores=[dict(period) for period in periods],
            is_absent=is_absent,
            total_earned_points=score.earned,
            total_possible_points=score.possible,
            daily_percentage=score.percentage,
            is_successful_day=success,
            level_at_time_of_report=level_at_report,
            level_after_report=transition.state.level,
            days_after_report=transition.state.days_in_level,
        )
        self._db.add(report)

        return PointSheetOutcome(
            report=report,
            score=score,
            success=success,
            transition=transition,
        )

    async def list_reports(
        self,
        caller: Caller,
        student_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[PointSheetReport], int]:
        """List a student's reports, newest first.

        Args:
            caller: Resolved caller.
            student_id: Student identifier.
            limit: Maximum results.
            offset: Pagination offset.

        Returns:
            Tuple of (reports, total count).

        Raises:
            StudentNotFoundError: If the student does not exist.
            PermissionDeniedError: If the student is outside the caller's school.
        """
        student = await self._load_student(student_id)
        if student is None:
            raise StudentNotFoundError(f"Student {student_id} not found.")

        can_view_students(caller, student.school_id).enforce()

        count_result = await self._db.execute(
            select(func.count())
            .select_from(PointSheetReport)
            .where(PointSheetReport.student_id == student_id)
        )
        total = count_result.scalar() or 0

        result = await self._db.execute(
            select(PointSheetReport)
            .where(PointSheetReport.student_id == student_id)
            .order_by(PointSheetReport.created_at.desc(), PointSheetReport.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total

    async def _load_student(self, student_id: str) -> Student | None:
        # populate_existing discards identity-map state left by a failed attempt
        result = await self._db.execute(
            select(Student)
            .where(Student.id == student_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _ensure_first_report_today(self, student_id: str) -> None:
        day_start, day_end = utc_day_bounds(utc_now())
        result = await self._db.execute(
            select(func.count())
            .select_from(PointSheetReport)
            .where(
                PointSheetReport.student_id == student_id,
                PointSheetReport.created_at >= day_start,
                PointSheetReport.created_at < day_end,
            )
        )
        if (result.scalar() or 0) > 0:
            raise DuplicateDailyReportError(
                "A point sheet has already been submitted for this student today."
            )

    def _log_outcome(self, student_id: str, outcome: PointSheetOutcome) -> None:
        transition = outcome.transition
        logger.info(
            "Point sheet %s for student %s: %.1f%% success=%s level %d->%d days=%d",
            outcome.report.id,
            student_id,
            outcome.score.percentage,
            outcome.success,
            transition.previous.level,
            transition.state.level,
            transition.state.days_in_level,
        )
        if transition.level_advanced:
            logger.info(
                "Student %s advanced to level %d", student_id, transition.state.level
            )
        if transition.program_completed:
            logger.info(
                "Student %s completed the program (level %d, %d days)",
                student_id, transition.state.level, transition.state.days_in_level,
            )
