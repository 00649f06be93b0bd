# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for RiseTrack.

This package contains domain services that encapsulate business logic.
Each domain module provides services that check the caller's permissions,
apply the domain rules and persist the result in one transaction.

Domains:
    auth: Accounts, sessions, emailed links and authorization decisions.
    user: Principal directory and caller resolution.
    provisioning: Administrator-created teachers and school admins.
    school: School records and staff listings.
    student: Student enrollment and profile edits.
    class_: Teacher-owned classes and their members.
    progression: The four-level program state machine.
    point_sheet: Daily point-sheet scoring and recording.
"""
