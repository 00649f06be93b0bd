# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for RiseTrack.

All timestamps are stored in UTC (PostgreSQL TIMESTAMPTZ) and all Python
datetimes are timezone-aware, so naive/aware mixing never happens.

Usage:
    from src.utils.datetime import utc_now

    created_at = Column(DateTime(timezone=True), default=utc_now)
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Naive datetimes are assumed to already be in UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def utc_day_bounds(dt: datetime) -> tuple[datetime, datetime]:
    """Get the half-open UTC calendar day containing a datetime.

    Args:
        dt: Any datetime; naive values are treated as UTC.

    Returns:
        Tuple of (start of day inclusive, start of next day exclusive).
    """
    aware = ensure_utc(dt)
    start = aware.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)
