# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the roster store.

Importing this package registers every table on Base.metadata.
"""

from src.infrastructure.database.models.base import Base, new_id
from src.infrastructure.database.models.point_sheet import (
    ImmutableRecordError,
    PointSheetReport,
)
from src.infrastructure.database.models.principal import Account, Principal
from src.infrastructure.database.models.school import School
from src.infrastructure.database.models.student import ClassRoom, Student, class_students

__all__ = [
    "Account",
    "Base",
    "ClassRoom",
    "ImmutableRecordError",
    "PointSheetReport",
    "Principal",
    "School",
    "Student",
    "class_students",
    "new_id",
]
