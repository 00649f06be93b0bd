# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Point-sheet domain package.

Daily RISE scoring and the recorder that applies it to students.
"""

from src.domains.point_sheet.scoring import (
    CATEGORIES,
    NOT_APPLICABLE,
    NUM_PERIODS,
    DailyScore,
    InvalidPointSheetError,
    compute_daily_score,
    is_successful_day,
    validate_periods,
)
from src.domains.point_sheet.service import (
    DuplicateDailyReportError,
    PointSheetOutcome,
    PointSheetService,
)

__all__ = [
    "CATEGORIES",
    "NOT_APPLICABLE",
    "NUM_PERIODS",
    "DailyScore",
    "DuplicateDailyReportError",
    "InvalidPointSheetError",
    "PointSheetOutcome",
    "PointSheetService",
    "compute_daily_score",
    "is_successful_day",
    "validate_periods",
]
