# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for AuthService."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.core.config import get_settings
from src.domains.auth.identity import AccountNotFoundError, EmailInUseError, VerifiedIdentity
from src.domains.auth.jwt import TokenPair
from src.domains.auth.service import AuthService, InvalidEmailError
from src.domains.user.service import PrincipalNotFoundError
from src.infrastructure.database.models.principal import Account, Principal
from src.models.common import Role

VERIFY_LINK = "https://app.risetrack.test/verify-email?token=v"
RESET_LINK = "https://app.risetrack.test/reset-password?token=r"


@pytest.fixture
def identity_provider() -> MagicMock:
    """Create a mock identity provider."""
    provider = MagicMock()
    provider.create_account = AsyncMock(
        side_effect=lambda email, password: Account(id=str(uuid4()), email=email)
    )
    provider.issue_tokens = MagicMock(
        return_value=TokenPair(
            access_token="a", refresh_token="r", expires_in=1800, refresh_expires_in=604800
        )
    )
    provider.generate_email_verification_link = AsyncMock(return_value=VERIFY_LINK)
    provider.generate_password_reset_link = AsyncMock(return_value=RESET_LINK)
    provider.sign_out = AsyncMock()
    return provider


@pytest.fixture
def service(
    mock_db: AsyncMock, mock_notifications: MagicMock, identity_provider: MagicMock
) -> AuthService:
    """Create an AuthService with a mock directory."""
    auth = AuthService(mock_db, get_settings(), mock_notifications, identity_provider)
    directory = MagicMock()
    directory.register_self_service = AsyncMock(
        side_effect=lambda account: Principal(
            id=account.id, email=account.email, role=Role.UNASSIGNED
        )
    )
    directory.get_principal = AsyncMock(return_value=None)
    auth._directory = directory
    return auth


class TestSignup:
    """Tests for signup()."""

    @pytest.mark.asyncio
    async def test_creates_principal_and_sends_verification(
        self,
        service: AuthService,
        mock_db: AsyncMock,
        mock_notifications: MagicMock,
        identity_provider: MagicMock,
    ) -> None:
        principal, tokens = await service.signup(" New@School.test ", "secret1")

        assert principal.email == "new@school.test"
        assert tokens.access_token == "a"
        identity_provider.create_account.assert_awaited_once_with("new@school.test", "secret1")
        mock_db.commit.assert_awaited_once()
        mock_notifications.send_email_verification.assert_awaited_once_with(
            "new@school.test", VERIFY_LINK
        )

    @pytest.mark.asyncio
    async def test_invalid_email(self, service: AuthService, identity_provider: MagicMock) -> None:
        with pytest.raises(InvalidEmailError) as exc_info:
            await service.signup("not-an-email", "secret1")

        assert exc_info.value.message == "Provided email is not valid."
        identity_provider.create_account.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_email_in_use_rolls_back(
        self,
        service: AuthService,
        mock_db: AsyncMock,
        mock_notifications: MagicMock,
        identity_provider: MagicMock,
    ) -> None:
        identity_provider.create_account.side_effect = EmailInUseError("taken@school.test")

        with pytest.raises(EmailInUseError):
            await service.signup("taken@school.test", "secret1")

        mock_db.rollback.assert_awaited_once()
        mock_notifications.send_email_verification.assert_not_awaited()


class TestSessions:
    """Tests for logout() and me()."""

    @pytest.mark.asyncio
    async def test_logout_revokes(self, service: AuthService, identity_provider: MagicMock) -> None:
        identity = VerifiedIdentity(principal_id="p-1", email="a@b.co", email_verified=True)

        await service.logout(identity)

        identity_provider.sign_out.assert_awaited_once_with("p-1")

    @pytest.mark.asyncio
    async def test_me_without_principal(self, service: AuthService) -> None:
        identity = VerifiedIdentity(principal_id="p-1", email="a@b.co", email_verified=True)

        with pytest.raises(PrincipalNotFoundError):
            await service.me(identity)


class TestPasswordReset:
    """Tests for request_password_reset()."""

    @pytest.mark.asyncio
    async def test_sends_link(self, service: AuthService, mock_notifications: MagicMock) -> None:
        await service.request_password_reset("Teacher@School.test")

        mock_notifications.send_password_reset.assert_awaited_once_with(
            "teacher@school.test", RESET_LINK
        )

    @pytest.mark.asyncio
    async def test_unknown_email_is_silent(
        self,
        service: AuthService,
        mock_notifications: MagicMock,
        identity_provider: MagicMock,
    ) -> None:
        """Test that unknown addresses look the same as known ones."""
        identity_provider.generate_password_reset_link.side_effect = AccountNotFoundError("x")

        await service.request_password_reset("ghost@school.test")

        mock_notifications.send_password_reset.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_email(self, service: AuthService) -> None:
        with pytest.raises(InvalidEmailError):
            await service.request_password_reset("ghost")


class TestEmailVerification:
    """Tests for request_email_verification()."""

    @pytest.mark.asyncio
    async def test_already_verified(
        self, service: AuthService, mock_notifications: MagicMock
    ) -> None:
        identity = VerifiedIdentity(principal_id="p-1", email="a@b.co", email_verified=True)

        await service.request_email_verification(identity)

        mock_notifications.send_email_verification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resends(self, service: AuthService, mock_notifications: MagicMock) -> None:
        identity = VerifiedIdentity(principal_id="p-1", email="a@b.co", email_verified=False)

        await service.request_email_verification(identity)

        mock_notifications.send_email_verification.assert_awaited_once_with("a@b.co", VERIFY_LINK)
