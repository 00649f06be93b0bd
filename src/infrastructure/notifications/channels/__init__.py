# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels for delivering notifications.

- EmailChannel: Sends email via SMTP

Usage:
    from src.infrastructure.notifications.channels import EmailChannel, NotificationPayload

    channel = EmailChannel(settings.email)
    result = await channel.send(payload)
"""

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    NotificationPayload,
)
from src.infrastructure.notifications.channels.email import EmailChannel

__all__ = [
    # Base types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    # Channels
    "EmailChannel",
]
