# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware package."""

from src.api.middleware.auth import AuthMiddleware, extract_bearer_token, get_access_token
from src.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from src.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "AuthMiddleware",
    "RequestContextMiddleware",
    "extract_bearer_token",
    "get_access_token",
    "limiter",
    "rate_limit_exceeded_handler",
]
