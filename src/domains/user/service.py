# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identity and role directory.

This module provides the DirectoryService that handles:
- Resolving a verified identity to a principal (the caller)
- Creating principals for self-service signups, including the one-time
  super admin bootstrap
- Creating scoped principals for administrator provisioning
- Listing a school's teachers

Example:
    >>> directory = DirectoryService(db_session)
    >>> caller = await directory.resolve_caller(identity)
    >>> teachers = await directory.list_teachers(caller.school_id)
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import InvalidArgumentError, NotFoundError, UnauthenticatedError
from src.domains.auth.identity import VerifiedIdentity
from src.domains.auth.policy import Caller
from src.infrastructure.database.models.principal import Account, Principal
from src.models.common import Role

logger = logging.getLogger(__name__)


class PrincipalNotFoundError(NotFoundError):
    """Raised when a verified identity has no directory entry."""


class InvalidPrincipalError(InvalidArgumentError):
    """Raised when a principal would violate the role/school rule."""


class DirectoryService:
    """Service for principal records.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the directory service.

        Args:
            db: Async database session.
        """
        self._db = db

    async def resolve_caller(self, identity: VerifiedIdentity | None) -> Caller:
        """Map a verified identity to the calling principal.

        Args:
            identity: Identity proven by the request's token, or None.

        Returns:
            The caller with role and school scope.

        Raises:
            UnauthenticatedError: If there is no verified identity.
            PrincipalNotFoundError: If the identity has no principal record.
        """
        if identity is None:
            raise UnauthenticatedError("The function must be called while authenticated.")

        principal = await self.get_principal(identity.principal_id)
        if principal is None:
            raise PrincipalNotFoundError("Caller's user record not found.")

        return Caller(
            principal_id=principal.id,
            role=principal.role,
            school_id=principal.school_id,
            email=principal.email,
        )

    async def get_principal(self, principal_id: str) -> Principal | None:
        """Get a principal by id."""
        result = await self._db.execute(select(Principal).where(Principal.id == principal_id))
        return result.scalar_one_or_none()

    async def register_self_service(self, account: Account) -> Principal:
        """Create the principal for a self-service signup.

        The first principal created while no super admin exists becomes the
        super admin. Everyone after that starts unassigned until an
        administrator provisions them. Two simultaneous first signups race
        on the single-super-admin index; the loser is created unassigned.

        Args:
            account: The freshly created account.

        Returns:
            The new principal, flushed but not committed.
        """
        if not await self._super_admin_exists():
            principal = Principal(id=account.id, email=account.email, role=Role.SUPER_ADMIN)
            try:
                async with self._db.begin_nested():
                    self._db.add(principal)
            except IntegrityError:
                logger.info(
                    "Super admin was claimed concurrently; %s starts unassigned", account.id
                )
            else:
                logger.info("Bootstrap: principal %s is the super admin", account.id)
                return principal

        principal = Principal(id=account.id, email=account.email, role=Role.UNASSIGNED)
        self._db.add(principal)
        await self._db.flush()
        logger.info("Principal created: %s (role=%s)", principal.id, principal.role.value)
        return principal

    async def create_principal(
        self,
        account: Account,
        role: Role,
        school_id: str | None,
        created_by: str | None = None,
    ) -> Principal:
        """Create a principal with an explicit role and school.

        Args:
            account: The account the principal belongs to.
            role: Role to assign.
            school_id: School scope; required for teachers and school admins.
            created_by: Principal id of the administrator.

        Returns:
            The new principal, flushed but not committed.

        Raises:
            InvalidPrincipalError: If a scoped role has no school.
        """
        if role.requires_school and not school_id:
            raise InvalidPrincipalError(f"A {role.value} must belong to a school")

        principal = Principal(
            id=account.id,
            email=account.email,
            role=role,
            school_id=school_id if role.requires_school else None,
            created_by=created_by,
        )
        self._db.add(principal)
        await self._db.flush()

        logger.info(
            "Principal created: %s (role=%s, school=%s, by=%s)",
            principal.id, role.value, principal.school_id, created_by,
        )
        return principal

    async def list_teachers(self, school_id: str) -> tuple[list[Principal], int]:
        """List a school's teachers ordered by email.

        Args:
            school_id: School identifier.

        Returns:
            Tuple of (principals, total count).
        """
        stmt = (
            select(Principal)
            .where(Principal.school_id == school_id, Principal.role == Role.TEACHER)
            .order_by(Principal.email.asc())
        )
        result = await self._db.execute(stmt)
        teachers = list(result.scalars().all())
        return teachers, len(teachers)

    async def _super_admin_exists(self) -> bool:
        result = await self._db.execute(
            select(func.count()).select_from(Principal).where(Principal.role == Role.SUPER_ADMIN)
        )
        return (result.scalar() or 0) > 0
