# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Daily RISE point-sheet scoring.

A point sheet rates a student in four categories (Respect, Integrity,
Self, Excellence) for each of six periods. Every rating is 0, 1 or 2, or
the NOT_APPLICABLE sentinel which removes that slot from both the earned
and the possible totals.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from src.core.errors import InvalidArgumentError
from src.domains.progression import required_threshold

CATEGORIES: tuple[str, ...] = ("respect", "integrity", "self", "excellence")
NUM_PERIODS = 6
POINTS_PER_CATEGORY_MAX = 2
NOT_APPLICABLE = -1
VALID_SCORES = frozenset({NOT_APPLICABLE, 0, 1, 2})


class InvalidPointSheetError(InvalidArgumentError):
    """Raised when a point sheet is malformed."""


@dataclass(frozen=True)
class DailyScore:
    """Totals computed from one point sheet.

    Attributes:
        earned: Points earned across applicable slots.
        possible: Maximum points across applicable slots.
        percentage: earned / possible * 100, or 0 when nothing applies.
    """

    earned: int
    possible: int
    percentage: float


ABSENT_SCORE = DailyScore(earned=0, possible=0, percentage=0.0)


def validate_periods(periods: Sequence[Mapping[str, int]], is_absent: bool) -> None:
    """Check the shape and values of a point sheet.

    A present student needs exactly one entry per period. An absent student
    may omit periods entirely, but any periods sent must still be valid.

    Args:
        periods: One mapping of category -> score per period, with a
            ``period`` key holding the 1-based period number.
        is_absent: Whether the student was absent.

    Raises:
        InvalidPointSheetError: If the sheet is malformed.
    """
    if not periods:
        if is_absent:
            return
        raise InvalidPointSheetError(
            f"A point sheet needs scores for all {NUM_PERIODS} periods"
        )

    if len(periods) != NUM_PERIODS:
        raise InvalidPointSheetError(
            f"Expected {NUM_PERIODS} periods, got {len(periods)}"
        )

    numbers = sorted(period.get("period", 0) for period in periods)
    if numbers != list(range(1, NUM_PERIODS + 1)):
        raise InvalidPointSheetError(
            f"Periods must be numbered 1 to {NUM_PERIODS} without duplicates"
        )

    for period in periods:
        for category in CATEGORIES:
            if category not in period:
                raise InvalidPointSheetError(
                    f"Period {period['period']} is missing a '{category}' score"
                )
            score = period[category]
            if isinstance(score, bool) or score not in VALID_SCORES:
                raise InvalidPointSheetError(
                    f"Period {period['period']} has invalid '{category}' score {score!r}; "
                    f"expected one of 0, 1, 2 or {NOT_APPLICABLE} (not applicable)"
                )


def compute_daily_score(periods: Sequence[Mapping[str, int]], is_absent: bool) -> DailyScore:
    """Compute the day's totals.

    Args:
        periods: Per-period category scores.
        is_absent: Whether the student was absent.

    Returns:
        DailyScore with earned, possible and percentage.
    """
    if is_absent:
        return ABSENT_SCORE

    earned = 0
    possible = 0
    for period in periods:
        for category in CATEGORIES:
            score = period[category]
            if score == NOT_APPLICABLE:
                continue
            earned += score
            possible += POINTS_PER_CATEGORY_MAX

    percentage = (earned / possible) * 100 if possible > 0 else 0.0
    return DailyScore(earned=earned, possible=possible, percentage=percentage)


def is_successful_day(percentage: float, level: int) -> bool:
    """Check whether a day's percentage meets the level's threshold.

    Args:
        percentage: Daily percentage.
        level: Student's level when the report was taken.

    Returns:
        True if the percentage is at or above the threshold.
    """
    return percentage >= required_threshold(level)
