# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Service error taxonomy.

Every error a service raises towards a caller derives from ServiceError and
carries a stable ``kind`` plus a human-readable message. The API layer maps
each kind to an HTTP status and returns the message verbatim.

Kinds:
- unauthenticated: no verifiable caller identity
- permission_denied: identity resolved but lacks rights for the scope/role
- invalid_argument: malformed or missing input
- not_found: referenced principal/student/school/class does not exist
- internal: downstream store, email or identity provider failure

Example:
    >>> raise StudentNotFoundError("Student abc not found")
"""


class ServiceError(Exception):
    """Base exception for all caller-facing service errors.

    Attributes:
        kind: Stable error kind identifier.
        status_code: HTTP status used when surfaced through the API.
        message: Human-readable error description.
    """

    kind: str = "internal"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Serialize to the API error envelope body."""
        return {"kind": self.kind, "message": self.message}


class UnauthenticatedError(ServiceError):
    """Raised when the caller has no verifiable identity."""

    kind = "unauthenticated"
    status_code = 401


class PermissionDeniedError(ServiceError):
    """Raised when the caller lacks rights for the requested scope or role."""

    kind = "permission_denied"
    status_code = 403


class InvalidArgumentError(ServiceError):
    """Raised for malformed input, disallowed values or missing fields."""

    kind = "invalid_argument"
    status_code = 400


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""

    kind = "not_found"
    status_code = 404


class InternalError(ServiceError):
    """Raised when a downstream dependency fails."""

    kind = "internal"
    status_code = 500
