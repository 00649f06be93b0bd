# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for self-service accounts and sessions.

This module provides the main AuthService that orchestrates:
- Self-service signup (account plus directory principal)
- Sign-in, token refresh and sign-out
- Password reset and email verification through emailed links

Signup is the only place a principal is created without an administrator.
The first signup while no super admin exists becomes the super admin;
everyone else starts unassigned.

Example:
    >>> auth_service = AuthService(db_session, settings, notifications)
    >>> principal, tokens = await auth_service.signup("a@school.org", "secret1")
    >>> tokens = await auth_service.refresh(tokens.refresh_token)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings
from src.core.errors import InvalidArgumentError, ServiceError
from src.domains.auth.identity import (
    AccountNotFoundError,
    IdentityProvider,
    VerifiedIdentity,
    is_valid_email,
    normalize_email,
)
from src.domains.auth.jwt import TokenPair
from src.domains.user.service import DirectoryService, PrincipalNotFoundError
from src.infrastructure.database.models.principal import Principal
from src.infrastructure.notifications.service import NotificationService

logger = logging.getLogger(__name__)


class InvalidEmailError(InvalidArgumentError):
    """Raised when an email address is malformed."""

    def __init__(self) -> None:
        super().__init__("Provided email is not valid.")


class AuthService:
    """Authentication service for self-service flows.

    Attributes:
        _db: Database session for queries.
        _identity: Account and token store.
        _directory: Principal records.
        _notifications: Email delivery.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        notifications: NotificationService,
        identity_provider: IdentityProvider | None = None,
    ) -> None:
        """Initialize the authentication service.

        Args:
            db: Async database session.
            settings: Application settings.
            notifications: Email delivery.
            identity_provider: Identity provider, built from db and
                settings if omitted.
        """
        self._db = db
        self._identity = identity_provider or IdentityProvider(db, settings)
        self._directory = DirectoryService(db)
        self._notifications = notifications

    async def signup(self, email: str, password: str) -> tuple[Principal, TokenPair]:
        """Create an account and its principal, then sign in.

        A verification email is sent after the commit; a delivery failure
        does not fail the signup.

        Args:
            email: Email address.
            password: Initial password.

        Returns:
            Tuple of (principal, token pair).

        Raises:
            InvalidEmailError: If the email is malformed.
            WeakPasswordError: If the password violates the policy.
            EmailInUseError: If the email is already registered.
        """
        if not is_valid_email(email):
            raise InvalidEmailError()
        email = normalize_email(email)

        try:
            account = await self._identity.create_account(email, password)
            principal = await self._directory.register_self_service(account)
            await self._db.commit()
        except ServiceError:
            await self._db.rollback()
            raise
        await self._db.refresh(principal)

        logger.info("Signup: %s registered as %s", principal.id, principal.role.value)

        link = await self._identity.generate_email_verification_link(email)
        await self._notifications.send_email_verification(email, link)

        return principal, self._identity.issue_tokens(account)

    async def login(self, email: str, password: str) -> TokenPair:
        """Sign in with email and password.

        Raises:
            InvalidCredentialsError: If the credentials do not match.
        """
        return await self._identity.authenticate(email, password)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        Raises:
            UnauthenticatedError: If the token is invalid, expired or revoked.
        """
        return await self._identity.refresh(refresh_token)

    async def logout(self, identity: VerifiedIdentity) -> None:
        """Revoke every session of the calling account."""
        await self._identity.sign_out(identity.principal_id)

    async def me(self, identity: VerifiedIdentity) -> Principal:
        """Get the calling principal.

        Raises:
            PrincipalNotFoundError: If the account has no principal record.
        """
        principal = await self._directory.get_principal(identity.principal_id)
        if principal is None:
            raise PrincipalNotFoundError("Caller's user record not found.")
        return principal

    async def request_password_reset(self, email: str) -> None:
        """Email a password reset link.

        Unknown addresses are accepted silently so that the response does
        not reveal whether an account exists.

        Raises:
            InvalidEmailError: If the email is malformed.
        """
        if not is_valid_email(email):
            raise InvalidEmailError()

        try:
            link = await self._identity.generate_password_reset_link(email)
        except AccountNotFoundError:
            logger.info("Password reset requested for unknown email")
            return

        await self._notifications.send_password_reset(normalize_email(email), link)

    async def confirm_password_reset(self, token: str, new_password: str) -> None:
        """Set a new password using a reset link token.

        Raises:
            InvalidLinkError: If the token is expired, invalid or used.
            WeakPasswordError: If the password violates the policy.
        """
        await self._identity.confirm_password_reset(token, new_password)

    async def request_email_verification(self, identity: VerifiedIdentity) -> None:
        """Resend the verification email to the calling account."""
        if identity.email_verified:
            return
        link = await self._identity.generate_email_verification_link(identity.email)
        await self._notifications.send_email_verification(identity.email, link)

    async def confirm_email_verification(self, token: str) -> None:
        """Mark an email as verified using a verification link token.

        Raises:
            InvalidLinkError: If the token is expired or invalid.
        """
        await self._identity.confirm_email_verification(token)
