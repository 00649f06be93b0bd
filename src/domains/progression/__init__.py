# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Level progression domain package.

Pure, storage-free rules for moving students through program levels.
"""

from src.domains.progression.machine import (
    INITIAL_STATE,
    LEVEL_DAY_REQUIREMENTS,
    LEVEL_THRESHOLDS,
    MAX_LEVEL,
    MIN_LEVEL,
    ProgressState,
    Transition,
    advance,
    day_requirement,
    required_threshold,
)

__all__ = [
    "INITIAL_STATE",
    "LEVEL_DAY_REQUIREMENTS",
    "LEVEL_THRESHOLDS",
    "MAX_LEVEL",
    "MIN_LEVEL",
    "ProgressState",
    "Transition",
    "advance",
    "day_requirement",
    "required_threshold",
]
