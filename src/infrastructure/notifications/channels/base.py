# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base classes for notification channels.

This module defines the abstract base class and shared types for
notification channels. A channel never raises for delivery problems; it
reports them in a ChannelResult so that callers can treat sending as
best-effort.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.utils.datetime import utc_now


class ChannelType(str, Enum):
    """Available notification channel types."""

    EMAIL = "email"


class DeliveryStatus(str, Enum):
    """Delivery status for a channel."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class NotificationPayload:
    """A rendered message ready for delivery.

    Attributes:
        notification_type: Template that produced the message.
        recipient_email: Destination address.
        subject: Subject line.
        html_body: HTML body.
        text_body: Plain text alternative.
        data: Extra values kept for logging.
    """

    notification_type: str
    recipient_email: str
    subject: str
    html_body: str
    text_body: str = ""
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChannelResult:
    """Result of a channel send operation.

    Attributes:
        channel: Which channel was used.
        status: Delivery status.
        message_id: External message ID (if available).
        error_message: Error message if failed or skipped.
        sent_at: When the attempt finished.
        metadata: Additional result metadata.
    """

    channel: ChannelType
    status: DeliveryStatus
    message_id: str | None = None
    error_message: str | None = None
    sent_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def delivered(self) -> bool:
        """Check whether the message was handed to the transport."""
        return self.status == DeliveryStatus.SENT


class BaseChannel(ABC):
    """Abstract base class for notification channels."""

    def __init__(self) -> None:
        """Initialize the channel."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        ...

    @abstractmethod
    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Send a notification through this channel.

        Args:
            payload: The notification payload to send.

        Returns:
            ChannelResult with delivery status.
        """
        ...

    def create_success_result(
        self,
        message_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ChannelResult:
        """Create a successful channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SENT,
            message_id=message_id,
            sent_at=utc_now(),
            metadata=metadata or {},
        )

    def create_failure_result(
        self,
        error_message: str,
        metadata: dict[str, Any] | None = None,
    ) -> ChannelResult:
        """Create a failed channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.FAILED,
            error_message=error_message,
            sent_at=utc_now(),
            metadata=metadata or {},
        )

    def create_skipped_result(self, reason: str) -> ChannelResult:
        """Create a skipped channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SKIPPED,
            error_message=reason,
            sent_at=utc_now(),
        )
