# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class API models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import EntityId


class ClassCreateRequest(BaseModel):
    """Request to create a class owned by the calling teacher."""

    name: str = Field(min_length=1, max_length=200)
    student_ids: list[EntityId] = Field(default_factory=list)


class ClassUpdateRequest(BaseModel):
    """Rename a class."""

    name: str = Field(min_length=1, max_length=200)


class ClassStudentAddRequest(BaseModel):
    """Add a student to a class."""

    student_id: EntityId


class ClassResponse(BaseModel):
    """Class details with member ids in name order."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    school_id: str
    teacher_id: str
    name: str
    student_ids: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ClassListResponse(BaseModel):
    """Classes of the calling teacher ordered by name."""

    items: list[ClassResponse]
    total: int
