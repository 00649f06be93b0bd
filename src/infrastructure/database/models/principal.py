# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account and principal models.

An Account is the authentication provider's record: credentials and
session state. A Principal is the directory entry that carries the role
and school scope used for authorization. Both share the same id.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, UUIDPrimaryKeyMixin
from src.models.common import Role

SCOPED_ROLES_SQL = "'schoolAdmin', 'teacher'"


class Account(UUIDPrimaryKeyMixin, Base):
    """Credentials and session state of a sign-in identity."""

    __tablename__ = "accounts"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # None until the owner sets a password through the emailed link
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    disabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    # Tokens issued before this instant are rejected
    sessions_revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Account {self.id} {self.email}>"


class Principal(Base):
    """A directory entry carrying role and school scope."""

    __tablename__ = "principals"
    __table_args__ = (
        CheckConstraint(
            f"role NOT IN ({SCOPED_ROLES_SQL}) OR school_id IS NOT NULL",
            name="scoped_role_has_school",
        ),
        # At most one super admin can ever be created by bootstrap
        Index(
            "uq_principals_single_super_admin",
            "role",
            unique=True,
            postgresql_where=text("role = 'superAdmin'"),
            sqlite_where=text("role = 'superAdmin'"),
        ),
        Index("ix_principals_school_id_role", "school_id", "role"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(
            Role,
            name="principal_role",
            native_enum=False,
            create_constraint=True,
            length=20,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
    )
    school_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("schools.id", ondelete="RESTRICT"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    created_by: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)

    account: Mapped[Account] = relationship(lazy="raise")

    def __repr__(self) -> str:
        return f"<Principal {self.id} {self.role.value}>"
