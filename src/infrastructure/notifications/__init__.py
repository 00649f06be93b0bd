# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transactional email for RiseTrack.

Key Components:
- NotificationService: renders templates and delivers them best-effort
- EmailChannel: SMTP delivery through aiosmtplib

Usage:
    from src.infrastructure.notifications import get_notification_service

    notifications = get_notification_service(settings)
    await notifications.send_welcome(email, link, role="teacher")
"""

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    EmailChannel,
    NotificationPayload,
)
from src.infrastructure.notifications.service import (
    NotificationService,
    get_notification_service,
    reset_notification_service,
)

__all__ = [
    # Service
    "NotificationService",
    "get_notification_service",
    "reset_notification_service",
    # Channel types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    # Channels
    "EmailChannel",
]
