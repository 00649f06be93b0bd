# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Principal (user) and provisioning API models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import Role


class PrincipalResponse(BaseModel):
    """A directory entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: Role
    school_id: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None


class PrincipalListResponse(BaseModel):
    """List of principals ordered by email."""

    items: list[PrincipalResponse]
    total: int


class ProvisionPrincipalRequest(BaseModel):
    """Administrator request to create a teacher or school admin.

    All fields are checked by the provisioning service, after the caller
    has been authenticated, so they are optional here.
    """

    email: str | None = Field(None, description="Email of the new user")
    role: str | None = Field(None, description="Either 'teacher' or 'schoolAdmin'")
    school_id: str | None = Field(None, description="School the new user belongs to")


class ProvisionPrincipalResponse(BaseModel):
    """Result of provisioning."""

    message: str
    principal_id: str
