# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student level-progression state machine.

A student's program position is the pair (level, days_in_current_level).
Each processed daily report feeds one success flag into the machine, which
returns the next position. The function is pure: the same inputs always
produce the same output and no state is kept between calls.

Levels and their rules:

    Level | Success threshold | Successful days to advance
    ------+-------------------+---------------------------
      1   |        85 %       |            10
      2   |        90 %       |            10
      3   |        95 %       |            15
      4   |       100 %       |            10 (terminal)

Level 4 is terminal. Reaching its day requirement marks the program as
completed but the day counter keeps accumulating and no further transition
happens; completion is an observation for a human follow-up.

Example:
    >>> state = ProgressState(level=1, days_in_level=9)
    >>> transition = advance(state, success=True)
    >>> transition.state
    ProgressState(level=2, days_in_level=0)
    >>> transition.level_advanced
    True
"""

from dataclasses import dataclass

MIN_LEVEL = 1
MAX_LEVEL = 4

LEVEL_THRESHOLDS: dict[int, float] = {
    1: 85.0,
    2: 90.0,
    3: 95.0,
    4: 100.0,
}

LEVEL_DAY_REQUIREMENTS: dict[int, int] = {
    1: 10,
    2: 10,
    3: 15,
    4: 10,
}


def _check_level(level: int) -> None:
    if level not in LEVEL_THRESHOLDS:
        raise ValueError(f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}")


def required_threshold(level: int) -> float:
    """Get the minimum daily percentage counted as successful at a level.

    Args:
        level: Program level (1-4).

    Returns:
        Threshold percentage.

    Raises:
        ValueError: If the level is outside 1-4.
    """
    _check_level(level)
    return LEVEL_THRESHOLDS[level]


def day_requirement(level: int) -> int:
    """Get the number of successful days needed to complete a level.

    Args:
        level: Program level (1-4).

    Returns:
        Required successful day count.

    Raises:
        ValueError: If the level is outside 1-4.
    """
    _check_level(level)
    return LEVEL_DAY_REQUIREMENTS[level]


@dataclass(frozen=True)
class ProgressState:
    """A student's position in the program.

    Attributes:
        level: Current program level (1-4).
        days_in_level: Successful days accumulated at the current level.
    """

    level: int = MIN_LEVEL
    days_in_level: int = 0

    def __post_init__(self) -> None:
        _check_level(self.level)
        if self.days_in_level < 0:
            raise ValueError(f"days_in_level must be non-negative, got {self.days_in_level}")

    @property
    def is_completed(self) -> bool:
        """Check whether the terminal level's requirement has been met."""
        return self.level == MAX_LEVEL and self.days_in_level >= LEVEL_DAY_REQUIREMENTS[MAX_LEVEL]


INITIAL_STATE = ProgressState()


@dataclass(frozen=True)
class Transition:
    """Result of feeding one daily outcome into the machine.

    Attributes:
        previous: State before the report.
        state: State after the report.
        success: The daily success flag that was applied.
    """

    previous: ProgressState
    state: ProgressState
    success: bool

    @property
    def level_advanced(self) -> bool:
        """Check whether the report moved the student to a new level."""
        return self.state.level > self.previous.level

    @property
    def program_completed(self) -> bool:
        """Check whether this report is the one that completed the program."""
        return self.state.is_completed and not self.previous.is_completed


def advance(state: ProgressState, success: bool) -> Transition:
    """Apply one daily outcome to a progress state.

    Args:
        state: Current progress state.
        success: Whether the day met the level's threshold.

    Returns:
        Transition holding the previous and next state.
    """
    if not success:
        return Transition(previous=state, state=state, success=False)

    days = state.days_in_level + 1
    if state.level < MAX_LEVEL and days >= LEVEL_DAY_REQUIREMENTS[state.level]:
        next_state = ProgressState(level=state.level + 1, days_in_level=0)
    else:
        # Level 4 keeps counting past its requirement
        next_state = ProgressState(level=state.level, days_in_level=days)

    return Transition(previous=state, state=next_state, success=True)
