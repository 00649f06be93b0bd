# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for RiseTrack.

Settings are Pydantic-based and loaded from environment variables.

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.program.max_attempts)
    3
"""

from src.core.config.settings import (
    APISettings,
    CORSSettings,
    DatabaseSettings,
    EmailSettings,
    JWTSettings,
    ProgramSettings,
    RateLimitSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "JWTSettings",
    "EmailSettings",
    "ProgramSettings",
    "RateLimitSettings",
    "CORSSettings",
    "APISettings",
]
