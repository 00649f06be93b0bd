# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class management API endpoints.

Classes are private groupings a teacher keeps for their own students:
- POST / - Create a class
- GET / - List the caller's classes
- GET /{class_id} - Get a class
- PATCH /{class_id} - Rename a class
- DELETE /{class_id} - Delete a class
- POST /{class_id}/students - Add a student
- DELETE /{class_id}/students/{student_id} - Remove a student

Only teachers with a school may use these endpoints, and only on their
own classes.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Response, status

from src.api.dependencies import CurrentCaller, DbSession
from src.domains.class_.service import ClassService
from src.infrastructure.database.models.student import ClassRoom
from src.models.class_ import (
    ClassCreateRequest,
    ClassListResponse,
    ClassResponse,
    ClassStudentAddRequest,
    ClassUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(class_: ClassRoom) -> ClassResponse:
    return ClassResponse(
        id=class_.id,
        school_id=class_.school_id,
        teacher_id=class_.teacher_id,
        name=class_.name,
        student_ids=class_.student_ids,
        created_at=class_.created_at,
        updated_at=class_.updated_at,
    )


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create class",
)
async def create_class(
    data: ClassCreateRequest,
    caller: CurrentCaller,
    db: DbSession,
) -> ClassResponse:
    """Create a class, optionally with initial members."""
    class_ = await ClassService(db).create_class(caller, data)
    return _to_response(class_)


@router.get(
    "",
    response_model=ClassListResponse,
    summary="List classes",
)
async def list_classes(
    caller: CurrentCaller,
    db: DbSession,
) -> ClassListResponse:
    """List the caller's classes ordered by name."""
    classes, total = await ClassService(db).list_classes(caller)
    return ClassListResponse(items=[_to_response(c) for c in classes], total=total)


@router.get(
    "/{class_id}",
    response_model=ClassResponse,
    summary="Get class",
)
async def get_class(
    class_id: UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> ClassResponse:
    """Get one of the caller's classes."""
    class_ = await ClassService(db).get_class(caller, str(class_id))
    return _to_response(class_)


@router.patch(
    "/{class_id}",
    response_model=ClassResponse,
    summary="Rename class",
)
async def update_class(
    class_id: UUID,
    data: ClassUpdateRequest,
    caller: CurrentCaller,
    db: DbSession,
) -> ClassResponse:
    """Rename a class."""
    class_ = await ClassService(db).update_class(caller, str(class_id), data)
    return _to_response(class_)


@router.delete(
    "/{class_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete class",
)
async def delete_class(
    class_id: UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> Response:
    """Delete a class. Students are not affected."""
    await ClassService(db).delete_class(caller, str(class_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{class_id}/students",
    response_model=ClassResponse,
    summary="Add student to class",
    description="Adding a student moves them out of the caller's other classes.",
)
async def add_student(
    class_id: UUID,
    data: ClassStudentAddRequest,
    caller: CurrentCaller,
    db: DbSession,
) -> ClassResponse:
    """Add a student to a class."""
    class_ = await ClassService(db).add_student(caller, str(class_id), data.student_id)
    return _to_response(class_)


@router.delete(
    "/{class_id}/students/{student_id}",
    response_model=ClassResponse,
    summary="Remove student from class",
)
async def remove_student(
    class_id: UUID,
    student_id: UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> ClassResponse:
    """Remove a student from a class."""
    class_ = await ClassService(db).remove_student(caller, str(class_id), str(student_id))
    return _to_response(class_)
