# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Provisioning service for administrator-created users.

Administrators create teachers and school admins directly. The new user
gets an account without a password and receives a welcome email with a
link that sets the password and verifies the address.

The provisioning flow:
1. Resolve the caller (unauthenticated / unknown caller fail first)
2. Validate email, role and school id
3. Authorize the role/school combination for the caller
4. Check the school exists
5. Create the account and principal in one transaction
6. Generate the "set your password" link
7. Send the welcome email (best-effort, failure is only logged)

Example:
    >>> service = ProvisioningService(db, settings, notifications)
    >>> result = await service.provision(identity, "t@school.org", "teacher", school_id)
    >>> result.principal_id
    '6f1c...'
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings
from src.core.errors import InternalError, InvalidArgumentError, ServiceError
from src.domains.auth.identity import IdentityProvider, VerifiedIdentity, is_valid_email, normalize_email
from src.domains.auth.policy import can_provision_principal
from src.domains.school.service import SchoolService
from src.domains.user.service import DirectoryService
from src.infrastructure.notifications.service import NotificationService
from src.models.common import PROVISIONABLE_ROLES, Role, canonical_id

logger = logging.getLogger(__name__)


class ProvisioningArgumentError(InvalidArgumentError):
    """Raised when the provisioning request is incomplete or malformed."""


@dataclass(frozen=True)
class ProvisioningResult:
    """Outcome of provisioning a principal.

    Attributes:
        message: Human-readable summary.
        principal_id: Id of the new principal.
        welcome_email_sent: Whether the welcome email was handed to SMTP.
    """

    message: str
    principal_id: str
    welcome_email_sent: bool


def parse_provisionable_role(role: str | None) -> Role:
    """Parse a requested role, accepting only provisionable ones.

    Raises:
        ProvisioningArgumentError: If the role is unknown or not provisionable.
    """
    try:
        parsed = Role(role)
    except ValueError:
        parsed = None
    if parsed not in PROVISIONABLE_ROLES:
        raise ProvisioningArgumentError(
            'Invalid role. Role must be "teacher" or "schoolAdmin".'
        )
    return parsed


class ProvisioningService:
    """Creates teachers and school admins on behalf of administrators.

    Attributes:
        _db: Async database session.
        _settings: Application settings.
        _notifications: Email delivery.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        notifications: NotificationService,
        identity_provider: IdentityProvider | None = None,
    ) -> None:
        """Initialize the provisioning service.

        Args:
            db: Async database session.
            settings: Application settings.
            notifications: Email delivery.
            identity_provider: Identity provider, built from db and
                settings if omitted.
        """
        self._db = db
        self._settings = settings
        self._notifications = notifications
        self._identity = identity_provider or IdentityProvider(db, settings)
        self._directory = DirectoryService(db)
        self._schools = SchoolService(db)

    async def provision(
        self,
        identity: VerifiedIdentity | None,
        email: str | None,
        role: str | None,
        school_id: str | None,
    ) -> ProvisioningResult:
        """Create a teacher or school admin.

        Args:
            identity: The caller's verified identity, None if unauthenticated.
            email: Email of the new user.
            role: Requested role, "teacher" or "schoolAdmin".
            school_id: School of the new user.

        Returns:
            ProvisioningResult with the new principal id.

        Raises:
            UnauthenticatedError: If there is no verified caller.
            PrincipalNotFoundError: If the caller has no principal record.
            ProvisioningArgumentError: If email, role or school id is invalid.
            PermissionDeniedError: If the caller may not create this user.
            SchoolNotFoundError: If the school does not exist.
            EmailInUseError: If the email is already registered.
            InternalError: If the store fails.
        """
        caller = await self._directory.resolve_caller(identity)

        if not email or not role or not school_id:
            raise ProvisioningArgumentError(
                "The function must be called with a valid email, role, and schoolId."
            )
        if not is_valid_email(email):
            raise ProvisioningArgumentError("Provided email is not valid.")
        target_role = parse_provisionable_role(role)
        try:
            school_id = canonical_id(school_id)
        except ValueError:
            raise ProvisioningArgumentError("Provided schoolId is not valid.")
        email = normalize_email(email)

        can_provision_principal(caller, target_role, school_id).enforce()

        await self._schools.require_school(school_id)

        try:
            account = await self._identity.create_account(email, password=None)
            principal = await self._directory.create_principal(
                account,
                role=target_role,
                school_id=school_id,
                created_by=caller.principal_id,
            )
            await self._db.commit()
        except ServiceError:
            await self._db.rollback()
            raise
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("Provisioning %s failed: %s", email, str(e), exc_info=True)
            raise InternalError(f"Failed to create user {email}.") from e

        logger.info(
            "Provisioned %s as %s in school %s (by %s)",
            principal.id, target_role.value, school_id, caller.principal_id,
        )

        link = await self._identity.generate_password_reset_link(email)
        result = await self._notifications.send_welcome(email, link, target_role.value)

        if result.delivered:
            message = (
                f"User {email} ({target_role.value}) created successfully. "
                "Welcome email sent to set password."
            )
        else:
            message = (
                f"User {email} ({target_role.value}) created successfully, "
                "but the welcome email could not be sent."
            )

        return ProvisioningResult(
            message=message,
            principal_id=principal.id,
            welcome_email_sent=result.delivered,
        )
