# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for RiseTrack.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from src.utils.datetime import ensure_utc, utc_day_bounds, utc_now
from src.utils.logging import bind_context, clear_context, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "ensure_utc",
    "utc_day_bounds",
]
