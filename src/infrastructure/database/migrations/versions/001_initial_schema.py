# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial roster store schema.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create roster store tables."""
    # =========================================================================
    # SCHOOLS
    # =========================================================================

    op.create_table(
        "schools",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("created_by", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    # =========================================================================
    # IDENTITY & DIRECTORY
    # =========================================================================

    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("email_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("disabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("sessions_revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "principals",
        sa.Column(
            "id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column(
            "school_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("schools.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("created_by", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "role IN ('superAdmin', 'schoolAdmin', 'teacher', 'unassigned')",
            name="ck_principals_principal_role",
        ),
        sa.CheckConstraint(
            "role NOT IN ('schoolAdmin', 'teacher') OR school_id IS NOT NULL",
            name="ck_principals_scoped_role_has_school",
        ),
    )
    op.create_index(
        "uq_principals_single_super_admin",
        "principals",
        ["role"],
        unique=True,
        postgresql_where=sa.text("role = 'superAdmin'"),
        sqlite_where=sa.text("role = 'superAdmin'"),
    )
    op.create_index("ix_principals_school_id_role", "principals", ["school_id", "role"])

    # =========================================================================
    # ROSTER
    # =========================================================================

    op.create_table(
        "students",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column(
            "school_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("schools.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("student_number", sa.String(50), nullable=True),
        sa.Column("current_level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("days_in_current_level", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_discipline_days_lost", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "program_start_date",
            sa.Date,
            nullable=False,
            server_default=sa.func.current_date(),
        ),
        sa.Column("created_by", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "last_updated",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("current_level BETWEEN 1 AND 4", name="ck_students_level_range"),
        sa.CheckConstraint("days_in_current_level >= 0", name="ck_students_days_non_negative"),
        sa.CheckConstraint(
            "total_discipline_days_lost >= 0", name="ck_students_discipline_non_negative"
        ),
    )
    op.create_index("ix_students_school_id", "students", ["school_id"])

    op.create_table(
        "classes",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column(
            "school_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("schools.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "teacher_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("principals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_classes_teacher_id", "classes", ["teacher_id"])

    op.create_table(
        "class_students",
        sa.Column(
            "class_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("classes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "student_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # =========================================================================
    # AUDIT LOG
    # =========================================================================

    op.create_table(
        "point_sheet_reports",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column(
            "student_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("students.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "school_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("schools.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("teacher_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("teacher_email", sa.String(255), nullable=False),
        sa.Column("period_scores", sa.JSON, nullable=False),
        sa.Column("is_absent", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("total_earned_points", sa.Integer, nullable=False),
        sa.Column("total_possible_points", sa.Integer, nullable=False),
        sa.Column("daily_percentage", sa.Float, nullable=False),
        sa.Column("is_successful_day", sa.Boolean, nullable=False),
        sa.Column("level_at_time_of_report", sa.Integer, nullable=False),
        sa.Column("level_after_report", sa.Integer, nullable=False),
        sa.Column("days_after_report", sa.Integer, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_point_sheet_reports_student_id_created_at",
        "point_sheet_reports",
        ["student_id", "created_at"],
    )
    op.create_index("ix_point_sheet_reports_school_id", "point_sheet_reports", ["school_id"])


def downgrade() -> None:
    """Drop roster store tables."""
    op.drop_table("point_sheet_reports")
    op.drop_table("class_students")
    op.drop_table("classes")
    op.drop_table("students")
    op.drop_index("uq_principals_single_super_admin", table_name="principals")
    op.drop_table("principals")
    op.drop_table("accounts")
    op.drop_table("schools")
