# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

This module provides JWT token creation and validation using python-jose.
Three token families share one signing key:

- access tokens (short-lived, sent as Bearer on every request)
- refresh tokens (long-lived, exchanged for a new pair)
- action tokens (embedded in password-reset and email-verification links)

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> tokens = jwt_manager.create_token_pair(principal_id="p-1", email="a@b.co")
    >>> claims = jwt_manager.decode_token(tokens.access_token, expected_type="access")
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Literal

from jose import ExpiredSignatureError, jwt
from pydantic import BaseModel

from src.core.config.settings import JWTSettings

logger = logging.getLogger(__name__)

TokenType = Literal["access", "refresh", "password_reset", "email_verification"]
ActionType = Literal["password_reset", "email_verification"]


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (principal ID).
        type: Token type.
        email: Account email at issue time.
        email_verified: Whether the email was verified at issue time.
        exp: Expiration timestamp.
        iat: Issued at timestamp with sub-second precision.
        jti: JWT ID for token tracking.
    """

    sub: str
    type: TokenType
    email: str | None = None
    email_verified: bool = False
    exp: int
    iat: float
    jti: str


class TokenPair(BaseModel):
    """Access and refresh token pair.

    Attributes:
        access_token: JWT access token string.
        refresh_token: JWT refresh token string.
        token_type: Token type (always "Bearer").
        expires_in: Access token expiration in seconds.
        refresh_expires_in: Refresh token expiration in seconds.
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_in: int


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.

    Example:
        >>> jwt_manager = JWTManager(settings)
        >>> link_token = jwt_manager.create_action_token(
        ...     principal_id="p-1",
        ...     email="teacher@school.org",
        ...     action="password_reset",
        ... )
        >>> jwt_manager.decode_token(link_token, expected_type="password_reset").sub
        'p-1'
    """

    def __init__(self, settings: JWTSettings) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
        """
        self._settings = settings

    def _encode(self, payload: dict) -> str:
        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def create_token_pair(
        self,
        principal_id: str,
        email: str | None = None,
        email_verified: bool = False,
    ) -> TokenPair:
        """Create an access and refresh token pair.

        Args:
            principal_id: Principal identifier.
            email: Account email address.
            email_verified: Whether the email has been verified.

        Returns:
            TokenPair with access and refresh tokens.
        """
        now = datetime.now(timezone.utc)
        refresh_exp = now + timedelta(days=self._settings.refresh_token_expire_days)

        access_token = self.create_access_token(
            principal_id=principal_id,
            email=email,
            email_verified=email_verified,
            now=now,
        )

        refresh_token = self._encode(
            {
                "sub": principal_id,
                "type": "refresh",
                "exp": int(refresh_exp.timestamp()),
                "iat": now.timestamp(),
                "jti": secrets.token_urlsafe(16),
            }
        )

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="Bearer",
            expires_in=self._settings.access_token_expire_minutes * 60,
            refresh_expires_in=self._settings.refresh_token_expire_days * 24 * 60 * 60,
        )

    def create_access_token(
        self,
        principal_id: str,
        email: str | None = None,
        email_verified: bool = False,
        now: datetime | None = None,
    ) -> str:
        """Create an access token.

        Args:
            principal_id: Principal identifier.
            email: Account email address.
            email_verified: Whether the email has been verified.
            now: Issue time, defaults to the current time.

        Returns:
            JWT access token string.
        """
        now = now or datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self._settings.access_token_expire_minutes)

        return self._encode(
            {
                "sub": principal_id,
                "type": "access",
                "email": email,
                "email_verified": email_verified,
                "exp": int(exp.timestamp()),
                "iat": now.timestamp(),
                "jti": secrets.token_urlsafe(16),
            }
        )

    def create_action_token(
        self,
        principal_id: str,
        email: str,
        action: ActionType,
    ) -> str:
        """Create a single-purpose token for an emailed link.

        Args:
            principal_id: Principal the link acts on.
            email: Account email the link was sent to.
            action: What the link allows.

        Returns:
            JWT action token string.
        """
        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self._settings.action_token_expire_minutes)

        return self._encode(
            {
                "sub": principal_id,
                "type": action,
                "email": email,
                "exp": int(exp.timestamp()),
                "iat": now.timestamp(),
                "jti": secrets.token_urlsafe(16),
            }
        )

    def decode_token(
        self,
        token: str,
        expected_type: TokenType | None = None,
    ) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.
            expected_type: Expected token type.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or wrong type.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except Exception as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}")

        if expected_type and payload.get("type") != expected_type:
            raise InvalidTokenError(
                f"Expected {expected_type} token, got {payload.get('type')}"
            )

        try:
            return TokenPayload(
                sub=payload["sub"],
                type=payload["type"],
                email=payload.get("email"),
                email_verified=payload.get("email_verified", False),
                exp=payload["exp"],
                iat=payload["iat"],
                jti=payload["jti"],
            )
        except Exception as e:
            raise InvalidTokenError(f"Invalid token claims: {str(e)}")

    def verify_token(
        self,
        token: str,
        expected_type: TokenType | None = None,
    ) -> bool:
        """Verify if a token is valid.

        Args:
            token: JWT token string.
            expected_type: Expected token type.

        Returns:
            True if token is valid, False otherwise.
        """
        try:
            self.decode_token(token, expected_type)
            return True
        except (TokenExpiredError, InvalidTokenError):
            return False

