# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School API models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SchoolCreateRequest(BaseModel):
    """Request to create a school."""

    name: str = Field(min_length=1, max_length=200, description="School name")
    address: str | None = Field(default=None, description="Postal address")
    contact_email: str | None = Field(default=None, max_length=255, description="Contact email")


class SchoolUpdateRequest(BaseModel):
    """Request to update a school. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    address: str | None = None
    contact_email: str | None = Field(default=None, max_length=255)


class SchoolResponse(BaseModel):
    """School details."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str | None = None
    contact_email: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SchoolListResponse(BaseModel):
    """List of schools ordered by name."""

    items: list[SchoolResponse]
    total: int
