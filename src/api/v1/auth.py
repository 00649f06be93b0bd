# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for self-service authentication:
- POST /signup - Create an account (first one becomes super admin)
- POST /login - Sign in with email and password
- POST /refresh - Refresh the token pair
- POST /logout - Revoke every session of the caller
- GET /me - Get the calling principal
- POST /password/reset - Email a password reset link
- POST /password/reset/confirm - Set a new password with a link token
- POST /verify-email - Confirm the email address with a link token
- POST /verify-email/resend - Resend the verification email

Example:
    POST /api/v1/auth/login
    {
        "email": "teacher@school.org",
        "password": "secret1"
    }
"""

import logging

from fastapi import APIRouter, Request, Response, status

from src.api.dependencies import AppSettings, DbSession, Identity, Notifications
from src.api.middleware.rate_limit import auth_limit, get_ip_only, limiter
from src.domains.auth.jwt import TokenPair
from src.domains.auth.service import AuthService
from src.models.auth import (
    EmailVerificationRequest,
    LoginRequest,
    MeResponse,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    RefreshRequest,
    SignupRequest,
    SignupResponse,
)
from src.models.common import MessageResponse
from src.models.user import PrincipalResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_auth_service(
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> AuthService:
    return AuthService(db, settings, notifications)


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Create an account. The first account becomes the super admin.",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def signup(
    request: Request,
    data: SignupRequest,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> SignupResponse:
    """Create an account and sign in."""
    service = _get_auth_service(db, settings, notifications)
    principal, tokens = await service.signup(data.email, data.password)
    return SignupResponse(
        principal=PrincipalResponse.model_validate(principal),
        tokens=tokens,
    )


@router.post(
    "/login",
    response_model=TokenPair,
    summary="Sign in",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def login(
    request: Request,
    data: LoginRequest,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> TokenPair:
    """Sign in with email and password."""
    service = _get_auth_service(db, settings, notifications)
    return await service.login(data.email, data.password)


@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh tokens",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def refresh(
    request: Request,
    data: RefreshRequest,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> TokenPair:
    """Exchange a refresh token for a new pair."""
    service = _get_auth_service(db, settings, notifications)
    return await service.refresh(data.refresh_token)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out everywhere",
)
async def logout(
    identity: Identity,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> Response:
    """Revoke every token issued to the caller so far."""
    service = _get_auth_service(db, settings, notifications)
    await service.logout(identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current principal",
)
async def get_me(
    identity: Identity,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> MeResponse:
    """Get the calling principal with its email verification state."""
    service = _get_auth_service(db, settings, notifications)
    principal = await service.me(identity)
    return MeResponse(
        **PrincipalResponse.model_validate(principal).model_dump(),
        email_verified=identity.email_verified,
    )


@router.post(
    "/password/reset",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Request a password reset",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def request_password_reset(
    request: Request,
    data: PasswordResetRequest,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> MessageResponse:
    """Email a password reset link if an account exists."""
    service = _get_auth_service(db, settings, notifications)
    await service.request_password_reset(data.email)
    return MessageResponse(
        message="If an account exists for this email, a reset link has been sent."
    )


@router.post(
    "/password/reset/confirm",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Set a new password",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def confirm_password_reset(
    request: Request,
    data: PasswordResetConfirmRequest,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> Response:
    """Set a new password using the emailed link token."""
    service = _get_auth_service(db, settings, notifications)
    await service.confirm_password_reset(data.token, data.new_password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/verify-email",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Verify email address",
)
async def confirm_email_verification(
    data: EmailVerificationRequest,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> Response:
    """Mark the email verified using the emailed link token."""
    service = _get_auth_service(db, settings, notifications)
    await service.confirm_email_verification(data.token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/verify-email/resend",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Resend verification email",
)
@limiter.limit(auth_limit)
async def resend_email_verification(
    request: Request,
    identity: Identity,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> MessageResponse:
    """Send a new verification email to the caller."""
    service = _get_auth_service(db, settings, notifications)
    await service.request_email_verification(identity)
    return MessageResponse(message="Verification email sent.")
