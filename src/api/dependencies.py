# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Verify the caller's token and resolve the calling principal
- Get service instances

Example:
    @router.get("/students")
    async def list_students(
        db: AsyncSession = Depends(get_db),
        caller: Caller = Depends(get_caller),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.auth import get_access_token
from src.core.config import Settings, get_settings
from src.core.errors import UnauthenticatedError
from src.domains.auth.identity import IdentityProvider, VerifiedIdentity
from src.domains.auth.policy import Caller
from src.domains.user.service import DirectoryService
from src.infrastructure.database.connection import get_session
from src.infrastructure.notifications.service import (
    NotificationService,
    get_notification_service,
)
from src.utils.logging import bind_context

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession committed or rolled back when the request ends.
    """
    async with get_session() as session:
        yield session


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


def get_notifications(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> NotificationService:
    """Get the email notification service."""
    return get_notification_service(settings)


def get_identity_provider(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> IdentityProvider:
    """Get an identity provider bound to the request session."""
    return IdentityProvider(db, settings)


# =========================================================================
# Authentication Dependencies
# =========================================================================


async def get_identity(
    request: Request,
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> VerifiedIdentity | None:
    """Verify the request's Bearer token, if it has one.

    Args:
        request: HTTP request.
        provider: Identity provider.

    Returns:
        The verified identity, or None when no token was sent.

    Raises:
        UnauthenticatedError: If a token was sent but is invalid, expired
            or revoked.
    """
    token = get_access_token(request)
    if token is None:
        return None
    return await provider.verify_token(token)


def require_identity(
    identity: Annotated[VerifiedIdentity | None, Depends(get_identity)],
) -> VerifiedIdentity:
    """Require a verified identity.

    Raises:
        UnauthenticatedError: If the request carries no token.
    """
    if identity is None:
        raise UnauthenticatedError("The function must be called while authenticated.")
    return identity


async def get_caller(
    identity: Annotated[VerifiedIdentity | None, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Caller:
    """Resolve the calling principal.

    Raises:
        UnauthenticatedError: If the request carries no valid token.
        PrincipalNotFoundError: If the identity has no principal record.
    """
    caller = await DirectoryService(db).resolve_caller(identity)
    bind_context(principal_id=caller.principal_id, role=caller.role.value)
    return caller


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Notifications = Annotated[NotificationService, Depends(get_notifications)]
Identity = Annotated[VerifiedIdentity, Depends(require_identity)]
OptionalIdentity = Annotated[VerifiedIdentity | None, Depends(get_identity)]
CurrentCaller = Annotated[Caller, Depends(get_caller)]
