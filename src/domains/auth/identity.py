# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identity provider backed by the accounts table.

The IdentityProvider owns credentials and tokens. It knows nothing about
roles or schools; the directory maps a verified identity to a principal.

Session revocation is coarse: signing out, or resetting a password,
stamps the account with ``sessions_revoked_at`` and every token issued
before that second stops verifying.

Example:
    >>> provider = IdentityProvider(db, settings)
    >>> account = await provider.create_account("t@school.org", None)
    >>> link = await provider.generate_password_reset_link("t@school.org")
"""

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings
from src.core.errors import InternalError, InvalidArgumentError, NotFoundError, UnauthenticatedError
from src.domains.auth.jwt import (
    ActionType,
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPair,
    TokenPayload,
    TokenType,
)
from src.domains.auth.password import PasswordHasher, check_password_policy
from src.infrastructure.database.models.principal import Account
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ACTION_PATHS: dict[str, str] = {
    "password_reset": "/reset-password",
    "email_verification": "/verify-email",
}


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookup."""
    return email.strip().lower()


def is_valid_email(email: str | None) -> bool:
    """Check an email address against the accepted shape."""
    return bool(email) and EMAIL_PATTERN.match(email.strip()) is not None


class EmailInUseError(InternalError):
    """Raised when an account with the email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"The email address {email} is already in use by another account.")
        self.email = email


class AccountNotFoundError(NotFoundError):
    """Raised when no account matches an email or id."""


class InvalidCredentialsError(UnauthenticatedError):
    """Raised when email/password sign-in fails."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class InvalidLinkError(InvalidArgumentError):
    """Raised when an emailed link token is expired, forged or already used."""


@dataclass(frozen=True)
class VerifiedIdentity:
    """A caller identity proven by a valid access token.

    Attributes:
        principal_id: Account/principal identifier.
        email: Account email address.
        email_verified: Whether the email address has been confirmed.
    """

    principal_id: str
    email: str
    email_verified: bool


class IdentityProvider:
    """Credential store and token issuer.

    Methods that change an account commit the session themselves, except
    create_account which only flushes so callers can write the matching
    principal in the same transaction.

    Attributes:
        _db: Async database session.
        _settings: Application settings.
        _jwt: Token encoder/decoder.
        _hasher: Password hasher.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        hasher: PasswordHasher | None = None,
    ) -> None:
        """Initialize the identity provider.

        Args:
            db: Async database session.
            settings: Application settings.
            hasher: Password hasher, a default bcrypt hasher if omitted.
        """
        self._db = db
        self._settings = settings
        self._jwt = JWTManager(settings.jwt)
        self._hasher = hasher or PasswordHasher()

    # =========================================================================
    # Accounts
    # =========================================================================

    async def create_account(
        self,
        email: str,
        password: str | None,
        email_verified: bool = False,
    ) -> Account:
        """Create an account.

        Args:
            email: Email address; stored lower-cased.
            password: Initial password, or None for an account whose owner
                will set one through a reset link.
            email_verified: Whether the email is already confirmed.

        Returns:
            The new account, flushed but not committed.

        Raises:
            WeakPasswordError: If the password violates the policy.
            EmailInUseError: If the email is already registered.
        """
        email = normalize_email(email)
        if password is not None:
            check_password_policy(password)

        if await self.get_account_by_email(email) is not None:
            raise EmailInUseError(email)

        account = Account(
            email=email,
            password_hash=self._hasher.hash(password) if password is not None else None,
            email_verified=email_verified,
            disabled=False,
        )
        self._db.add(account)

        try:
            await self._db.flush()
        except IntegrityError as e:
            # Lost a race with another signup for the same email
            await self._db.rollback()
            raise EmailInUseError(email) from e

        logger.info("Account created: %s", account.id)
        return account

    async def get_account(self, account_id: str) -> Account | None:
        """Get an account by id."""
        result = await self._db.execute(select(Account).where(Account.id == account_id))
        return result.scalar_one_or_none()

    async def get_account_by_email(self, email: str) -> Account | None:
        """Get an account by email, case-insensitively."""
        result = await self._db.execute(
            select(Account).where(Account.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    # =========================================================================
    # Sessions
    # =========================================================================

    async def authenticate(self, email: str, password: str) -> TokenPair:
        """Sign in with email and password.

        Args:
            email: Account email.
            password: Plain text password.

        Returns:
            A fresh token pair.

        Raises:
            InvalidCredentialsError: If the email is unknown, the password
                is wrong or unset, or the account is disabled.
        """
        account = await self.get_account_by_email(email)
        if account is None or account.disabled:
            raise InvalidCredentialsError()

        if not self._hasher.verify(password, account.password_hash):
            logger.info("Failed sign-in for account %s", account.id)
            raise InvalidCredentialsError()

        logger.info("Account signed in: %s", account.id)
        return self.issue_tokens(account)

    def issue_tokens(self, account: Account) -> TokenPair:
        """Issue an access/refresh pair for an account."""
        return self._jwt.create_token_pair(
            principal_id=account.id,
            email=account.email,
            email_verified=account.email_verified,
        )

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        Raises:
            UnauthenticatedError: If the token is invalid, expired or
                revoked, or the account is gone or disabled.
        """
        _, account = await self._load_session("refresh", refresh_token)
        return self.issue_tokens(account)

    async def verify_token(self, token: str) -> VerifiedIdentity:
        """Verify an access token.

        Args:
            token: Bearer access token.

        Returns:
            The verified identity with the account's current email state.

        Raises:
            UnauthenticatedError: If the token is invalid, expired or
                revoked, or the account is gone or disabled.
        """
        _, account = await self._load_session("access", token)
        return VerifiedIdentity(
            principal_id=account.id,
            email=account.email,
            email_verified=account.email_verified,
        )

    async def sign_out(self, principal_id: str) -> None:
        """Revoke every token issued to an account so far.

        Raises:
            AccountNotFoundError: If the account does not exist.
        """
        account = await self.get_account(principal_id)
        if account is None:
            raise AccountNotFoundError(f"Account {principal_id} not found")

        account.sessions_revoked_at = utc_now()
        await self._db.commit()
        logger.info("Sessions revoked for account %s", principal_id)

    def _decode(self, expected_type: TokenType, token: str) -> TokenPayload:
        try:
            return self._jwt.decode_token(token, expected_type=expected_type)
        except TokenExpiredError:
            raise UnauthenticatedError("Token has expired")
        except InvalidTokenError:
            raise UnauthenticatedError("Invalid authentication token")

    async def _load_session(
        self,
        expected_type: TokenType,
        token: str,
    ) -> tuple[TokenPayload, Account]:
        payload = self._decode(expected_type, token)

        account = await self.get_account(payload.sub)
        if account is None or account.disabled:
            raise UnauthenticatedError("Account is disabled or no longer exists")

        if _issued_before_revocation(payload, account):
            raise UnauthenticatedError("Session has been revoked")

        return payload, account

    # =========================================================================
    # Emailed links
    # =========================================================================

    def _build_link(self, account: Account, action: ActionType) -> str:
        token = self._jwt.create_action_token(
            principal_id=account.id,
            email=account.email,
            action=action,
        )
        base = self._settings.frontend_url.rstrip("/")
        return f"{base}{ACTION_PATHS[action]}?{urlencode({'token': token})}"

    async def generate_password_reset_link(self, email: str) -> str:
        """Build a "set your password" link for an account.

        Args:
            email: Account email.

        Returns:
            Absolute URL into the web client carrying a signed token.

        Raises:
            AccountNotFoundError: If no account has this email.
        """
        account = await self.get_account_by_email(email)
        if account is None:
            raise AccountNotFoundError(f"No account found for {normalize_email(email)}")
        return self._build_link(account, "password_reset")

    async def generate_email_verification_link(self, email: str) -> str:
        """Build an email verification link for an account.

        Raises:
            AccountNotFoundError: If no account has this email.
        """
        account = await self.get_account_by_email(email)
        if account is None:
            raise AccountNotFoundError(f"No account found for {normalize_email(email)}")
        return self._build_link(account, "email_verification")

    async def _load_link_account(self, action: ActionType, token: str) -> Account:
        try:
            payload = self._jwt.decode_token(token, expected_type=action)
        except TokenExpiredError:
            raise InvalidLinkError("This link has expired. Please request a new one.")
        except InvalidTokenError:
            raise InvalidLinkError("This link is invalid.")

        account = await self.get_account(payload.sub)
        if account is None or account.email != payload.email:
            raise InvalidLinkError("This link is invalid.")

        if action == "password_reset" and _issued_before_revocation(payload, account):
            raise InvalidLinkError("This link has already been used.")

        return account

    async def confirm_password_reset(self, token: str, new_password: str) -> None:
        """Set a new password through a reset link.

        The link was delivered to the account's inbox, so following it
        also confirms the email address. Existing sessions are revoked,
        which also makes the link single-use.

        Raises:
            InvalidLinkError: If the token is expired, invalid or used.
            WeakPasswordError: If the password violates the policy.
        """
        check_password_policy(new_password)
        account = await self._load_link_account("password_reset", token)

        account.password_hash = self._hasher.hash(new_password)
        account.email_verified = True
        account.sessions_revoked_at = utc_now()
        await self._db.commit()

        logger.info("Password reset for account %s", account.id)

    async def confirm_email_verification(self, token: str) -> None:
        """Mark an account's email as verified through a verification link.

        Raises:
            InvalidLinkError: If the token is expired or invalid.
        """
        account = await self._load_link_account("email_verification", token)
        if not account.email_verified:
            account.email_verified = True
            await self._db.commit()
            logger.info("Email verified for account %s", account.id)


def _issued_before_revocation(payload: TokenPayload, account: Account) -> bool:
    revoked_at = ensure_utc(account.sessions_revoked_at)
    if revoked_at is None:
        return False
    return payload.iat < revoked_at.timestamp()
