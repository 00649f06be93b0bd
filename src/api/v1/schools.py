# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School management API endpoints.

This module provides endpoints for school management:
- POST / - Create a new school
- GET / - List schools
- GET /{school_id} - Get school details
- PUT /{school_id} - Update school
- GET /{school_id}/teachers - List the school's teachers

Access:
- superAdmin: Full access to all schools
- schoolAdmin / teacher: Read access to their own school

Example:
    POST /api/v1/schools
    {
        "name": "Greenwood Middle School",
        "address": "12 Oak Street",
        "contact_email": "office@greenwood.org"
    }
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.api.dependencies import CurrentCaller, DbSession
from src.domains.school.service import SchoolService
from src.models.school import (
    SchoolCreateRequest,
    SchoolListResponse,
    SchoolResponse,
    SchoolUpdateRequest,
)
from src.models.user import PrincipalListResponse, PrincipalResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=SchoolResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create school",
    description="Create a new school. Requires super admin.",
)
async def create_school(
    data: SchoolCreateRequest,
    caller: CurrentCaller,
    db: DbSession,
) -> SchoolResponse:
    """Create a new school."""
    school = await SchoolService(db).create_school(caller, data)
    return SchoolResponse.model_validate(school)


@router.get(
    "",
    response_model=SchoolListResponse,
    summary="List schools",
    description="Super admins see every school; others see their own.",
)
async def list_schools(
    caller: CurrentCaller,
    db: DbSession,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> SchoolListResponse:
    """List schools ordered by name."""
    schools, total = await SchoolService(db).list_schools(caller, limit=limit, offset=offset)
    return SchoolListResponse(
        items=[SchoolResponse.model_validate(school) for school in schools],
        total=total,
    )


@router.get(
    "/{school_id}",
    response_model=SchoolResponse,
    summary="Get school",
)
async def get_school(
    school_id: UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> SchoolResponse:
    """Get a school by id."""
    school = await SchoolService(db).get_school(caller, str(school_id))
    return SchoolResponse.model_validate(school)


@router.put(
    "/{school_id}",
    response_model=SchoolResponse,
    summary="Update school",
    description="Update school details. Requires super admin.",
)
async def update_school(
    school_id: UUID,
    data: SchoolUpdateRequest,
    caller: CurrentCaller,
    db: DbSession,
) -> SchoolResponse:
    """Update a school."""
    school = await SchoolService(db).update_school(caller, str(school_id), data)
    return SchoolResponse.model_validate(school)


@router.get(
    "/{school_id}/teachers",
    response_model=PrincipalListResponse,
    summary="List teachers",
    description="List a school's teachers. Requires super admin or the school's admin.",
)
async def list_teachers(
    school_id: UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> PrincipalListResponse:
    """List a school's teachers ordered by email."""
    teachers, total = await SchoolService(db).list_teachers(caller, str(school_id))
    return PrincipalListResponse(
        items=[PrincipalResponse.model_validate(teacher) for teacher in teachers],
        total=total,
    )
