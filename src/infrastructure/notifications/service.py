# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification service for transactional email.

All sends are best-effort: the service returns the channel result and
logs anything that was not delivered, but never raises for delivery
problems. Callers must not roll back their work because an email failed.
"""

import logging

from src.core.config.settings import Settings
from src.infrastructure.notifications import templates
from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    DeliveryStatus,
    EmailChannel,
    NotificationPayload,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """Renders templates and hands them to the email channel.

    Attributes:
        _channel: Delivery channel.
        _app_name: Program name used in subjects and bodies.
    """

    def __init__(self, channel: BaseChannel, app_name: str) -> None:
        """Initialize the notification service.

        Args:
            channel: Delivery channel, normally an EmailChannel.
            app_name: Program name used in subjects and bodies.
        """
        self._channel = channel
        self._app_name = app_name

    async def send_welcome(self, email: str, link: str, role: str) -> ChannelResult:
        """Send the "set your password" message to a provisioned user."""
        payload = templates.welcome_email(self._app_name, email, link, role)
        return await self._deliver(payload)

    async def send_email_verification(self, email: str, link: str) -> ChannelResult:
        """Send the verification link to a self-service signup."""
        payload = templates.verification_email(self._app_name, email, link)
        return await self._deliver(payload)

    async def send_password_reset(self, email: str, link: str) -> ChannelResult:
        """Send a requested password reset link."""
        payload = templates.password_reset_email(self._app_name, email, link)
        return await self._deliver(payload)

    async def _deliver(self, payload: NotificationPayload) -> ChannelResult:
        result = await self._channel.send(payload)

        if result.status != DeliveryStatus.SENT:
            logger.warning(
                "%s email to %s not delivered (%s): %s",
                payload.notification_type,
                payload.recipient_email,
                result.status.value,
                result.error_message,
            )
        return result


# Singleton instance management
_service_instance: NotificationService | None = None


def get_notification_service(settings: Settings) -> NotificationService:
    """Get or create the notification service singleton.

    Args:
        settings: Application settings.

    Returns:
        NotificationService instance.
    """
    global _service_instance
    if _service_instance is None:
        _service_instance = NotificationService(
            channel=EmailChannel(settings.email),
            app_name=settings.app_name,
        )
    return _service_instance


def reset_notification_service() -> None:
    """Drop the singleton so the next call rebuilds it from settings."""
    global _service_instance
    _service_instance = None
