# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""End-to-end service flows against a real SQLite database.

The schema is created from the ORM metadata, so these tests cover the
mapped constraints, optimistic versioning and the report immutability
hooks without a PostgreSQL server.
"""

from collections.abc import AsyncIterator
from pathlib import Path
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm.exc import StaleDataError

from conftest import full_sheet
from src.core.config import get_settings
from src.domains.auth.identity import IdentityProvider, VerifiedIdentity
from src.domains.auth.password import PasswordHasher
from src.domains.auth.service import AuthService
from src.domains.point_sheet import PointSheetService
from src.domains.provisioning.service import ProvisioningService
from src.domains.school.service import SchoolService
from src.domains.student.service import StudentService
from src.domains.user.service import DirectoryService
from src.infrastructure.database.models import Base, ImmutableRecordError
from src.infrastructure.database.models.point_sheet import PointSheetReport
from src.infrastructure.database.models.student import Student
from src.models.common import Role
from src.models.school import SchoolCreateRequest
from src.models.student import StudentCreateRequest

pytestmark = pytest.mark.integration

HASHER = PasswordHasher(rounds=4)


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Create a file-backed SQLite schema and a session factory over it."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'risetrack.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

    await engine.dispose()


def identity_of(principal_id: str, email: str) -> VerifiedIdentity:
    return VerifiedIdentity(principal_id=principal_id, email=email, email_verified=True)


def link_token(link: str) -> str:
    return parse_qs(urlparse(link).query)["token"][0]


class TestOnboardingFlow:
    """Tests for signup, provisioning and the first point sheets."""

    @pytest.mark.asyncio
    async def test_school_lifecycle(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        mock_notifications: MagicMock,
    ) -> None:
        settings = get_settings()

        async with session_factory() as db:
            auth = AuthService(
                db, settings, mock_notifications, IdentityProvider(db, settings, HASHER)
            )
            root, _ = await auth.signup("root@risetrack.test", "rootpass1")
            late, _ = await auth.signup("late@risetrack.test", "latepass1")

        assert root.role == Role.SUPER_ADMIN
        assert late.role == Role.UNASSIGNED
        assert root.created_at is not None

        async with session_factory() as db:
            root_caller = await DirectoryService(db).resolve_caller(
                identity_of(root.id, root.email)
            )
            school = await SchoolService(db).create_school(
                root_caller, SchoolCreateRequest(name="Lincoln Middle")
            )

            result = await ProvisioningService(
                db, settings, mock_notifications, IdentityProvider(db, settings, HASHER)
            ).provision(
                identity_of(root.id, root.email), "Teacher@Lincoln.test", "teacher", school.id
            )

        welcome = mock_notifications.send_welcome.await_args
        assert welcome.args[0] == "teacher@lincoln.test"
        assert welcome.args[2] == "teacher"

        async with session_factory() as db:
            identity = IdentityProvider(db, settings, HASHER)
            await identity.confirm_password_reset(link_token(welcome.args[1]), "chalkboard9")
            tokens = await identity.authenticate("teacher@lincoln.test", "chalkboard9")

        assert tokens.access_token

        async with session_factory() as db:
            teacher = await DirectoryService(db).resolve_caller(
                identity_of(result.principal_id, "teacher@lincoln.test")
            )
            assert teacher.role == Role.TEACHER
            assert teacher.school_id == school.id

            student = await StudentService(db).create_student(
                root_caller, StudentCreateRequest(school_id=school.id, name="Avery Chen")
            )
            assert (student.current_level, student.days_in_current_level) == (1, 0)
            assert student.program_start_date is not None

            service = PointSheetService(db)
            for _ in range(10):
                outcome = await service.submit(teacher, student.id, full_sheet(), False)

            assert outcome.transition.level_advanced is True

            absent = await service.submit(teacher, student.id, [], True)
            assert absent.success is False

            reports, total = await service.list_reports(teacher, student.id)

        assert total == 11
        assert len(reports) == 11

        async with session_factory() as db:
            stored = await db.get(Student, student.id)

        assert (stored.current_level, stored.days_in_current_level) == (2, 0)
        assert stored.version == 12


class TestStoredReports:
    """Tests for report immutability and versioned student rows."""

    @pytest_asyncio.fixture
    async def seeded(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        mock_notifications: MagicMock,
    ) -> tuple[str, str]:
        """Create a super admin, a school, a teacher and one report."""
        settings = get_settings()
        async with session_factory() as db:
            root, _ = await AuthService(
                db, settings, mock_notifications, IdentityProvider(db, settings, HASHER)
            ).signup("root@risetrack.test", "rootpass1")
            root_caller = await DirectoryService(db).resolve_caller(
                identity_of(root.id, root.email)
            )
            school = await SchoolService(db).create_school(
                root_caller, SchoolCreateRequest(name="Roosevelt High")
            )
            admin = await ProvisioningService(
                db, settings, mock_notifications, IdentityProvider(db, settings, HASHER)
            ).provision(
                identity_of(root.id, root.email), "admin@roosevelt.test", "schoolAdmin", school.id
            )
            admin_caller = await DirectoryService(db).resolve_caller(
                identity_of(admin.principal_id, "admin@roosevelt.test")
            )
            student = await StudentService(db).create_student(
                admin_caller, StudentCreateRequest(school_id=school.id, name="Noor Haddad")
            )
            outcome = await PointSheetService(db).submit(
                admin_caller, student.id, full_sheet(), False
            )
        return student.id, outcome.report.id

    @pytest.mark.asyncio
    async def test_report_cannot_be_modified(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        seeded: tuple[str, str],
    ) -> None:
        _, report_id = seeded

        async with session_factory() as db:
            report = await db.get(PointSheetReport, report_id)
            report.daily_percentage = 10.0

            with pytest.raises(ImmutableRecordError):
                await db.commit()

    @pytest.mark.asyncio
    async def test_report_cannot_be_deleted(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        seeded: tuple[str, str],
    ) -> None:
        _, report_id = seeded

        async with session_factory() as db:
            report = await db.get(PointSheetReport, report_id)
            await db.delete(report)

            with pytest.raises(ImmutableRecordError):
                await db.commit()

    @pytest.mark.asyncio
    async def test_stale_student_write_is_detected(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        seeded: tuple[str, str],
    ) -> None:
        """Test that a write based on an outdated version is refused."""
        student_id, _ = seeded

        async with session_factory() as first, session_factory() as second:
            mine = await first.get(Student, student_id)
            theirs = await second.get(Student, student_id)

            theirs.days_in_current_level += 1
            await second.commit()

            mine.days_in_current_level += 1
            with pytest.raises(StaleDataError):
                await first.commit()

        async with session_factory() as db:
            row = (
                await db.execute(select(Student).where(Student.id == student_id))
            ).scalar_one()

        assert row.days_in_current_level == 2
