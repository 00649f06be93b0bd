# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API models."""

from pydantic import BaseModel, Field

from src.domains.auth.jwt import TokenPair
from src.models.user import PrincipalResponse


class SignupRequest(BaseModel):
    """Self-service account creation."""

    email: str = Field(max_length=255)
    password: str = Field(description="At least 6 characters")


class LoginRequest(BaseModel):
    """Email and password sign-in."""

    email: str
    password: str


class RefreshRequest(BaseModel):
    """Exchange a refresh token for a new pair."""

    refresh_token: str


class PasswordResetRequest(BaseModel):
    """Ask for a password reset link."""

    email: str


class PasswordResetConfirmRequest(BaseModel):
    """Set a new password with a reset link token."""

    token: str
    new_password: str


class EmailVerificationRequest(BaseModel):
    """Confirm an email address with a verification link token."""

    token: str


class SignupResponse(BaseModel):
    """Created principal and a token pair for immediate sign-in."""

    principal: PrincipalResponse
    tokens: TokenPair


class MeResponse(PrincipalResponse):
    """The calling principal plus account state."""

    email_verified: bool = False
