# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authorization decisions for state-changing and scoped operations.

Each action has one decision function that looks only at the resolved
caller and the target's scope. The functions never touch storage or the
request, which keeps them testable on their own; services call them and
raise through Decision.enforce().

Rules:
- Provision principal: superAdmin may create any provisionable role in any
  school; schoolAdmin may create teachers in its own school only.
- Submit point sheet: teacher or schoolAdmin, and the student must belong
  to the caller's school.
- Schools: only superAdmin manages them; members may view their own.
- Students: superAdmin or the school's admin manage them; the school's
  admins and teachers may view them and their report history.
- Classes: teachers manage their own classes only.

Example:
    >>> caller = Caller(principal_id="u1", role=Role.TEACHER, school_id="A")
    >>> can_submit_point_sheet(caller, student_school_id="B").allowed
    False
"""

from dataclasses import dataclass

from src.core.errors import PermissionDeniedError
from src.models.common import Role


@dataclass(frozen=True)
class Caller:
    """A resolved, authenticated principal.

    Attributes:
        principal_id: Principal identifier.
        role: Principal role.
        school_id: Owning school, None for superAdmin/unassigned.
        email: Principal email address.
    """

    principal_id: str
    role: Role
    school_id: str | None = None
    email: str | None = None

    def belongs_to(self, school_id: str | None) -> bool:
        """Check whether the caller is a member of the given school."""
        return self.school_id is not None and school_id is not None and self.school_id == school_id


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check.

    Attributes:
        allowed: Whether the action is permitted.
        reason: Why the action was denied, None when allowed.
    """

    allowed: bool
    reason: str | None = None

    def enforce(self) -> None:
        """Raise if the decision is a denial.

        Raises:
            PermissionDeniedError: If the action is not allowed.
        """
        if not self.allowed:
            raise PermissionDeniedError(self.reason or "Permission denied")


ALLOW = Decision(allowed=True)


def _deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


def can_provision_principal(
    caller: Caller,
    target_role: Role,
    target_school_id: str | None,
) -> Decision:
    """Decide whether the caller may create a principal.

    Args:
        caller: Resolved caller.
        target_role: Role requested for the new principal.
        target_school_id: School requested for the new principal.

    Returns:
        Decision.
    """
    if caller.role == Role.SUPER_ADMIN:
        return ALLOW

    if caller.role == Role.SCHOOL_ADMIN:
        if target_role != Role.TEACHER:
            return _deny("School admins can only create teachers.")
        if not caller.belongs_to(target_school_id):
            return _deny("School admins can only create teachers for their own school.")
        return ALLOW

    return _deny("Only super admins and school admins can create users.")


def can_submit_point_sheet(caller: Caller, student_school_id: str) -> Decision:
    """Decide whether the caller may submit a point sheet for a student.

    Args:
        caller: Resolved caller.
        student_school_id: School owning the student.

    Returns:
        Decision.
    """
    if caller.role not in (Role.TEACHER, Role.SCHOOL_ADMIN):
        return _deny("Only teachers and school admins can submit point sheets.")

    if not caller.belongs_to(student_school_id):
        return _deny("Student does not belong to your school.")

    return ALLOW


def can_manage_schools(caller: Caller) -> Decision:
    """Decide whether the caller may create or edit schools."""
    if caller.role != Role.SUPER_ADMIN:
        return _deny("Only super admins can manage schools.")
    return ALLOW


def can_view_school(caller: Caller, school_id: str) -> Decision:
    """Decide whether the caller may read a school's details."""
    if caller.role == Role.SUPER_ADMIN or caller.belongs_to(school_id):
        return ALLOW
    return _deny("You do not have access to this school.")


def can_list_school_staff(caller: Caller, school_id: str) -> Decision:
    """Decide whether the caller may list a school's teachers."""
    if caller.role == Role.SUPER_ADMIN:
        return ALLOW
    if caller.role == Role.SCHOOL_ADMIN and caller.belongs_to(school_id):
        return ALLOW
    return _deny("Only the school's administrators can list its staff.")


def can_manage_students(caller: Caller, school_id: str) -> Decision:
    """Decide whether the caller may create or edit students of a school."""
    if caller.role == Role.SUPER_ADMIN:
        return ALLOW
    if caller.role == Role.SCHOOL_ADMIN and caller.belongs_to(school_id):
        return ALLOW
    return _deny("Only the school's administrators can manage its students.")


def can_view_students(caller: Caller, school_id: str) -> Decision:
    """Decide whether the caller may read students of a school."""
    if caller.role == Role.SUPER_ADMIN:
        return ALLOW
    if caller.role in (Role.SCHOOL_ADMIN, Role.TEACHER) and caller.belongs_to(school_id):
        return ALLOW
    return _deny("Student does not belong to your school.")


def can_manage_classes(caller: Caller) -> Decision:
    """Decide whether the caller may own classes."""
    if caller.role != Role.TEACHER or caller.school_id is None:
        return _deny("Only teachers assigned to a school can manage classes.")
    return ALLOW


def can_modify_class(caller: Caller, class_teacher_id: str) -> Decision:
    """Decide whether the caller may change a specific class."""
    decision = can_manage_classes(caller)
    if not decision.allowed:
        return decision
    if caller.principal_id != class_teacher_id:
        return _deny("You can only manage your own classes.")
    return ALLOW
