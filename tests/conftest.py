# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (services over a mocked AsyncSession)
- Integration tests (HTTP layer, SQLite-backed flows)
"""

import os
from collections.abc import Iterator
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

# Settings are cached and read at import time by the rate limiter
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("FRONTEND_URL", "https://app.risetrack.test")

from src.core.config import clear_settings_cache  # noqa: E402
from src.domains.auth.policy import Caller  # noqa: E402
from src.infrastructure.notifications.channels.base import (  # noqa: E402
    ChannelResult,
    ChannelType,
    DeliveryStatus,
)
from src.models.common import Role  # noqa: E402


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Reload settings for every test so env patches take effect."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Database Fixtures
# =============================================================================


def make_result(
    scalar: Any = None,
    scalar_one_or_none: Any = None,
    scalars: list[Any] | None = None,
    rowcount: int = 0,
) -> MagicMock:
    """Build a mock of an AsyncSession.execute() result."""
    result = MagicMock()
    result.scalar.return_value = scalar
    result.scalar_one_or_none.return_value = scalar_one_or_none
    result.scalars.return_value.all.return_value = scalars or []
    result.rowcount = rowcount
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock()

    @asynccontextmanager
    async def begin_nested():
        yield MagicMock()

    db.begin_nested = MagicMock(side_effect=begin_nested)
    return db


# =============================================================================
# Caller Fixtures
# =============================================================================


@pytest.fixture
def school_id() -> str:
    """Provide a school ID."""
    return "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def other_school_id() -> str:
    """Provide a second school ID."""
    return "550e8400-e29b-41d4-a716-4466554400ff"


@pytest.fixture
def super_admin() -> Caller:
    """A super admin caller."""
    return Caller(principal_id=str(uuid4()), role=Role.SUPER_ADMIN, email="root@risetrack.test")


@pytest.fixture
def school_admin(school_id: str) -> Caller:
    """A school admin of school_id."""
    return Caller(
        principal_id=str(uuid4()),
        role=Role.SCHOOL_ADMIN,
        school_id=school_id,
        email="admin@school.test",
    )


@pytest.fixture
def teacher(school_id: str) -> Caller:
    """A teacher of school_id."""
    return Caller(
        principal_id=str(uuid4()),
        role=Role.TEACHER,
        school_id=school_id,
        email="teacher@school.test",
    )


@pytest.fixture
def unassigned() -> Caller:
    """A self-service principal without a role."""
    return Caller(principal_id=str(uuid4()), role=Role.UNASSIGNED, email="new@school.test")


# =============================================================================
# Notification Fixtures
# =============================================================================


def sent_result() -> ChannelResult:
    """A successful delivery result."""
    return ChannelResult(
        channel=ChannelType.EMAIL,
        status=DeliveryStatus.SENT,
        message_id="<msg@risetrack.test>",
    )


def failed_result() -> ChannelResult:
    """A failed delivery result."""
    return ChannelResult(
        channel=ChannelType.EMAIL,
        status=DeliveryStatus.FAILED,
        error_message="SMTP error: connection refused",
    )


@pytest.fixture
def mock_notifications() -> MagicMock:
    """Create a mock notification service that always delivers."""
    notifications = MagicMock()
    notifications.send_welcome = AsyncMock(return_value=sent_result())
    notifications.send_email_verification = AsyncMock(return_value=sent_result())
    notifications.send_password_reset = AsyncMock(return_value=sent_result())
    return notifications


# =============================================================================
# Helper Fixtures
# =============================================================================


def full_sheet(score: int = 2, **overrides: Any) -> list[dict[str, Any]]:
    """Build six periods with every category set to score.

    Keyword overrides of the form ``p3_self=0`` change one slot.
    """
    periods = []
    for number in range(1, 7):
        period: dict[str, Any] = {
            "period": number,
            "respect": score,
            "integrity": score,
            "self": score,
            "excellence": score,
            "notes": "",
        }
        for key, value in overrides.items():
            prefix, category = key.split("_", 1)
            if prefix == f"p{number}":
                period[category] = value
        periods.append(period)
    return periods
