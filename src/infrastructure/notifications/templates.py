# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transactional email templates.

Each builder returns a NotificationPayload with matching HTML and plain
text bodies.
"""

from html import escape

from src.infrastructure.notifications.channels.base import NotificationPayload

WELCOME = "welcome"
EMAIL_VERIFICATION = "email_verification"
PASSWORD_RESET = "password_reset"


def _wrap(app_name: str, paragraphs: list[str]) -> str:
    body = "\n".join(f"    <p>{paragraph}</p>" for paragraph in paragraphs)
    return (
        "<!DOCTYPE html>\n<html>\n<head><meta charset=\"utf-8\"></head>\n"
        "<body style=\"font-family: Arial, sans-serif; line-height: 1.6; color: #1F2937;\">\n"
        f"{body}\n"
        f"    <p>Thank you,<br>The {escape(app_name)} Team</p>\n"
        "</body>\n</html>"
    )


def welcome_email(app_name: str, recipient_email: str, link: str, role: str) -> NotificationPayload:
    """Message sent to a provisioned teacher or school admin.

    Args:
        app_name: Program name shown to the user.
        recipient_email: New user's email.
        link: Password reset link that also verifies the email.
        role: Role the user was given.

    Returns:
        Rendered payload.
    """
    safe_link = escape(link, quote=True)
    html_body = _wrap(
        app_name,
        [
            f"Welcome to the {escape(app_name)}!",
            "Your account has been created by an administrator.",
            "To set your password and verify your email address, please click the link below:",
            f'<a href="{safe_link}">Set Your Password and Verify Email</a>',
            "This link is valid for a limited time.",
            "If you did not expect this email, please ignore it.",
        ],
    )
    text_body = (
        f"Welcome to the {app_name}!\n\n"
        "Your account has been created by an administrator.\n"
        "To set your password and verify your email address, open this link:\n"
        f"{link}\n\n"
        "This link is valid for a limited time.\n"
        "If you did not expect this email, please ignore it.\n"
    )
    return NotificationPayload(
        notification_type=WELCOME,
        recipient_email=recipient_email,
        subject=f"Welcome to {app_name}! Set Your Password",
        html_body=html_body,
        text_body=text_body,
        data={"role": role},
    )


def verification_email(app_name: str, recipient_email: str, link: str) -> NotificationPayload:
    """Message asking a self-service signup to confirm their address."""
    safe_link = escape(link, quote=True)
    html_body = _wrap(
        app_name,
        [
            f"Thanks for signing up for the {escape(app_name)}.",
            "Please confirm your email address by clicking the link below:",
            f'<a href="{safe_link}">Verify Email</a>',
            "If you did not create an account, please ignore this email.",
        ],
    )
    text_body = (
        f"Thanks for signing up for the {app_name}.\n"
        f"Confirm your email address: {link}\n"
    )
    return NotificationPayload(
        notification_type=EMAIL_VERIFICATION,
        recipient_email=recipient_email,
        subject=f"Verify your email for {app_name}",
        html_body=html_body,
        text_body=text_body,
    )


def password_reset_email(app_name: str, recipient_email: str, link: str) -> NotificationPayload:
    """Message carrying a requested password reset link."""
    safe_link = escape(link, quote=True)
    html_body = _wrap(
        app_name,
        [
            "We received a request to reset your password.",
            f'<a href="{safe_link}">Reset Your Password</a>',
            "If you did not request this, you can ignore this email.",
        ],
    )
    text_body = (
        "We received a request to reset your password.\n"
        f"Reset it here: {link}\n"
    )
    return NotificationPayload(
        notification_type=PASSWORD_RESET,
        recipient_email=recipient_email,
        subject=f"Reset your {app_name} password",
        html_body=html_body,
        text_body=text_body,
    )
