# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management API endpoints.

This module provides endpoints for administrator-managed principals:
- POST /provision - Create a teacher or school admin and email them a
  "set your password" link

Super admins may create teachers and school admins for any school.
School admins may only create teachers for their own school.

Example:
    POST /api/v1/users/provision
    Headers:
        Authorization: Bearer <token>
    Body:
        {
            "email": "teacher@school.org",
            "role": "teacher",
            "school_id": "6f1c..."
        }
"""

import logging

from fastapi import APIRouter, status

from src.api.dependencies import AppSettings, DbSession, Notifications, OptionalIdentity
from src.domains.provisioning import ProvisioningService
from src.models.user import ProvisionPrincipalRequest, ProvisionPrincipalResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/provision",
    response_model=ProvisionPrincipalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Provision a user",
    description="Create a teacher or school admin. Requires super admin or school admin.",
)
async def provision_user(
    data: ProvisionPrincipalRequest,
    identity: OptionalIdentity,
    db: DbSession,
    settings: AppSettings,
    notifications: Notifications,
) -> ProvisionPrincipalResponse:
    """Create a principal on behalf of an administrator.

    Args:
        data: Email, role and school of the new user.
        identity: The caller's verified identity, if any.
        db: Database session.
        settings: Application settings.
        notifications: Email delivery.

    Returns:
        Summary message and the new principal id.
    """
    service = ProvisioningService(db, settings, notifications)
    result = await service.provision(identity, data.email, data.role, data.school_id)
    return ProvisionPrincipalResponse(
        message=result.message,
        principal_id=result.principal_id,
    )
