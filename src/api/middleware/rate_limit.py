# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting using slowapi.

Rate limits are applied per client: the principal id when the request
carries a valid token, the IP address otherwise. Endpoints that accept
credentials or send email use the stricter auth limit.

Example:
    @router.post("/login")
    @limiter.limit(auth_limit)
    async def login(request: Request, ...):
        ...
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.core.config import get_settings

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Args:
        request: HTTP request.

    Returns:
        ``principal:<id>`` for authenticated requests, ``ip:<addr>`` otherwise.
    """
    principal_id = getattr(request.state, "principal_id", None)
    if principal_id:
        return f"principal:{principal_id}"
    return f"ip:{get_remote_address(request)}"


def get_ip_only(request: Request) -> str:
    """Get client IP address only.

    Used for credential endpoints where the caller is not yet authenticated.
    """
    return get_remote_address(request)


def auth_limit() -> str:
    """Limit string for credential and email endpoints."""
    return f"{get_settings().rate_limit.auth_requests_per_minute}/minute"


settings = get_settings()
limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.rate_limit.requests_per_minute}/minute"],
    storage_uri=settings.rate_limit.storage_uri,
    enabled=settings.rate_limit.enabled,
)


async def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded,
) -> JSONResponse:
    """Return a 429 in the standard error envelope.

    Args:
        request: HTTP request.
        exc: Rate limit exceeded exception.

    Returns:
        JSON response with error details.
    """
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_client_identifier(request),
    )

    response = JSONResponse(
        status_code=429,
        content={
            "error": {
                "kind": "resource_exhausted",
                "message": "Too many requests. Please try again later.",
            }
        },
    )
    return request.app.state.limiter._inject_headers(
        response, request.state.view_rate_limit
    )
