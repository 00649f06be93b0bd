# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing and password policy using bcrypt.

Accounts created by an administrator start without a password; the owner
sets one through the emailed reset link. Every password that reaches the
store passes check_password_policy() first.

Example:
    >>> hasher = PasswordHasher(rounds=4)
    >>> hashed = hasher.hash("correct horse")
    >>> hasher.verify("correct horse", hashed)
    True
"""

import logging

import bcrypt

from src.core.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


class WeakPasswordError(InvalidArgumentError):
    """Raised when a password does not satisfy the policy."""


def check_password_policy(password: str) -> None:
    """Validate a new password.

    Args:
        password: Candidate password.

    Raises:
        WeakPasswordError: If the password is too short or too long.
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(
            f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise WeakPasswordError(
            f"Password must not exceed {MAX_PASSWORD_BYTES} bytes"
        )


class PasswordHasher:
    """bcrypt hashing with a configurable work factor.

    Attributes:
        _rounds: Number of bcrypt rounds for hashing.
    """

    def __init__(self, rounds: int = 12) -> None:
        """Initialize the password hasher.

        Args:
            rounds: bcrypt cost factor. Tests pass a low value.
        """
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password.

        Args:
            password: Plain text password to hash.

        Returns:
            bcrypt hash string with salt embedded.

        Raises:
            ValueError: If password is empty.
        """
        if not password:
            raise ValueError("Password cannot be empty")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Check a password against a stored hash.

        Accounts without a password never verify.

        Args:
            password: Plain text password to verify.
            password_hash: Stored bcrypt hash, or None.

        Returns:
            True if password matches the hash, False otherwise.
        """
        if not password or not password_hash:
            return False

        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False
