# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for daily point-sheet scoring."""

import pytest

from conftest import full_sheet
from src.domains.point_sheet import (
    NOT_APPLICABLE,
    InvalidPointSheetError,
    compute_daily_score,
    is_successful_day,
    validate_periods,
)


class TestValidatePeriods:
    """Tests for validate_periods()."""

    def test_full_sheet_is_valid(self) -> None:
        """Test that six complete periods pass."""
        validate_periods(full_sheet(), is_absent=False)

    def test_absent_sheet_may_be_empty(self) -> None:
        """Test that an absent student needs no periods."""
        validate_periods([], is_absent=True)

    def test_present_sheet_needs_periods(self) -> None:
        """Test that a present student with no periods is rejected."""
        with pytest.raises(InvalidPointSheetError):
            validate_periods([], is_absent=False)

    def test_wrong_period_count(self) -> None:
        """Test that five periods are rejected."""
        with pytest.raises(InvalidPointSheetError, match="Expected 6 periods"):
            validate_periods(full_sheet()[:5], is_absent=False)

    def test_duplicate_period_numbers(self) -> None:
        """Test that period numbers must cover 1 to 6."""
        periods = full_sheet()
        periods[5]["period"] = 1

        with pytest.raises(InvalidPointSheetError, match="numbered"):
            validate_periods(periods, is_absent=False)

    def test_missing_category(self) -> None:
        """Test that every category must be scored."""
        periods = full_sheet()
        del periods[2]["integrity"]

        with pytest.raises(InvalidPointSheetError, match="integrity"):
            validate_periods(periods, is_absent=False)

    @pytest.mark.parametrize("score", [3, -2, 5, True])
    def test_out_of_range_score(self, score: object) -> None:
        """Test that scores outside {-1, 0, 1, 2} are rejected."""
        with pytest.raises(InvalidPointSheetError):
            validate_periods(full_sheet(p4_respect=score), is_absent=False)

    def test_absent_sheet_with_periods_still_validated(self) -> None:
        """Test that periods sent with an absence are checked too."""
        with pytest.raises(InvalidPointSheetError):
            validate_periods(full_sheet(p1_self=9), is_absent=True)


class TestComputeDailyScore:
    """Tests for compute_daily_score()."""

    def test_perfect_day(self) -> None:
        """Test that all 2s give 48 of 48."""
        score = compute_daily_score(full_sheet(), is_absent=False)

        assert score.earned == 48
        assert score.possible == 48
        assert score.percentage == 100.0

    def test_not_applicable_excluded_from_both_totals(self) -> None:
        """Test that N/A slots shrink earned and possible alike."""
        periods = full_sheet(p1_respect=NOT_APPLICABLE, p2_self=NOT_APPLICABLE)

        score = compute_daily_score(periods, is_absent=False)

        assert score.earned == 44
        assert score.possible == 44
        assert score.percentage == 100.0

    def test_partial_scores(self) -> None:
        """Test a day with some lost points."""
        periods = full_sheet(p1_respect=1, p2_integrity=0, p3_self=1)

        score = compute_daily_score(periods, is_absent=False)

        assert score.earned == 44
        assert score.possible == 48
        assert score.percentage == pytest.approx(91.6666, rel=1e-4)

    def test_all_not_applicable_is_zero(self) -> None:
        """Test that a day with nothing applicable scores zero."""
        score = compute_daily_score(full_sheet(score=NOT_APPLICABLE), is_absent=False)

        assert score.earned == 0
        assert score.possible == 0
        assert score.percentage == 0.0

    def test_absence_overrides_scores(self) -> None:
        """Test that an absent student scores zero regardless of periods."""
        score = compute_daily_score(full_sheet(), is_absent=True)

        assert (score.earned, score.possible, score.percentage) == (0, 0, 0.0)


class TestIsSuccessfulDay:
    """Tests for is_successful_day()."""

    @pytest.mark.parametrize(
        "percentage,level,expected",
        [
            (85.0, 1, True),
            (84.99, 1, False),
            (90.0, 2, True),
            (89.9, 2, False),
            (95.0, 3, True),
            (94.0, 3, False),
            (100.0, 4, True),
            (99.9, 4, False),
            (0.0, 1, False),
        ],
    )
    def test_threshold_is_inclusive(self, percentage: float, level: int, expected: bool) -> None:
        """Test that meeting the threshold exactly counts as success."""
        assert is_successful_day(percentage, level) is expected
