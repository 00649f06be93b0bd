# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email notification channel using async SMTP.

This channel sends transactional email using aiosmtplib. Every message
carries a plain text and an HTML part.

Configuration (via EmailSettings, ``SMTP_`` environment variables):
- SMTP_HOST: SMTP server hostname
- SMTP_PORT: SMTP server port (default: 587)
- SMTP_USERNAME: SMTP authentication username
- SMTP_PASSWORD: SMTP authentication password
- SMTP_USE_TLS: Use STARTTLS (default: true)
- SMTP_FROM_EMAIL: Sender email address
- SMTP_FROM_NAME: Sender display name
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid

import aiosmtplib

from src.core.config.settings import EmailSettings
from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)


class EmailChannel(BaseChannel):
    """Email notification channel using async SMTP.

    An unconfigured channel skips every message instead of failing, so a
    development setup without SMTP still works end to end.
    """

    def __init__(self, settings: EmailSettings) -> None:
        """Initialize the email channel.

        Args:
            settings: SMTP settings.
        """
        super().__init__()
        self._settings = settings

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.EMAIL

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Send an email via SMTP.

        Args:
            payload: The rendered message.

        Returns:
            ChannelResult with delivery status.
        """
        if not self._settings.is_configured:
            self.logger.warning(
                "Email not sent (%s to %s): SMTP is not configured",
                payload.notification_type,
                payload.recipient_email,
            )
            return self.create_skipped_result("SMTP configuration incomplete")

        if not payload.recipient_email:
            return self.create_skipped_result("No recipient email address")

        message = self._build_email_message(payload)

        try:
            await aiosmtplib.send(
                message,
                hostname=self._settings.host,
                port=self._settings.port,
                username=self._settings.username,
                password=self._settings.password.get_secret_value(),
                start_tls=self._settings.use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            self.logger.error(
                "Failed to send email to %s: %s",
                payload.recipient_email,
                str(e),
                exc_info=True,
            )
            return self.create_failure_result(
                f"SMTP error: {str(e)}",
                metadata={"recipient": payload.recipient_email},
            )

        self.logger.info(
            "Email sent to %s: %s",
            payload.recipient_email,
            payload.subject,
        )
        return self.create_success_result(
            message_id=message["Message-ID"],
            metadata={"recipient": payload.recipient_email},
        )

    def _build_email_message(self, payload: NotificationPayload) -> MIMEMultipart:
        """Build the MIME message.

        Args:
            payload: Rendered message.

        Returns:
            MIMEMultipart message ready to send.
        """
        message = MIMEMultipart("alternative")

        message["From"] = formataddr((self._settings.from_name, self._settings.from_email))
        message["To"] = payload.recipient_email
        message["Subject"] = payload.subject
        message["Message-ID"] = make_msgid(domain=self._settings.from_email.split("@")[-1])

        message.attach(MIMEText(payload.text_body or payload.subject, "plain", "utf-8"))
        message.attach(MIMEText(payload.html_body, "html", "utf-8"))

        return message
