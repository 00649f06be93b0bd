# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Common API models and enums shared across domains."""

from enum import Enum
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, Field


def canonical_id(value: str) -> str:
    """Normalize an entity id to the lowercase hyphenated UUID form.

    Raises:
        ValueError: If the value is not a UUID.
    """
    return str(UUID(value))


# Entity id carried in a request body
EntityId = Annotated[str, AfterValidator(canonical_id)]


class Role(str, Enum):
    """Closed set of principal roles."""

    SUPER_ADMIN = "superAdmin"
    SCHOOL_ADMIN = "schoolAdmin"
    TEACHER = "teacher"
    UNASSIGNED = "unassigned"

    @property
    def requires_school(self) -> bool:
        """Check whether principals with this role must belong to a school."""
        return self in (Role.SCHOOL_ADMIN, Role.TEACHER)


# Roles an administrator may hand out through provisioning
PROVISIONABLE_ROLES = frozenset({Role.TEACHER, Role.SCHOOL_ADMIN})


class ErrorBody(BaseModel):
    """Structured error returned by every failing endpoint."""

    kind: str = Field(description="Error kind, e.g. permission_denied")
    message: str = Field(description="Human-readable message")


class ErrorResponse(BaseModel):
    """Error envelope."""

    error: ErrorBody


class MessageResponse(BaseModel):
    """Simple acknowledgement response."""

    message: str
