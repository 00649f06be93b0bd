# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Provisioning domain.

Administrators create teachers and school admins who then set their own
password through an emailed link.
"""

from src.domains.provisioning.service import (
    ProvisioningArgumentError,
    ProvisioningResult,
    ProvisioningService,
    parse_provisionable_role,
)

__all__ = [
    "ProvisioningArgumentError",
    "ProvisioningResult",
    "ProvisioningService",
    "parse_provisionable_role",
]
