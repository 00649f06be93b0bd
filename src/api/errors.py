# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers mapping service errors to HTTP responses.

Every failing endpoint answers with the same envelope:

    {"error": {"kind": "permission_denied", "message": "..."}}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.errors import InvalidArgumentError, ServiceError

logger = logging.getLogger(__name__)

HTTP_STATUS_KINDS: dict[int, str] = {
    400: "invalid_argument",
    401: "unauthenticated",
    403: "permission_denied",
    404: "not_found",
    405: "invalid_argument",
}

# Leading parts of a validation error location, left out of the message
REQUEST_PARTS = frozenset({"body", "path", "query"})


def error_response(kind: str, message: str, status_code: int) -> JSONResponse:
    """Build the error envelope response."""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"kind": kind, "message": message}},
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle errors raised by the domain services."""
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc
        )
    else:
        logger.info(
            "%s %s rejected (%s): %s",
            request.method, request.url.path, exc.kind, exc.message,
        )
    return error_response(exc.kind, exc.message, exc.status_code)


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report request body/query validation failures as invalid_argument."""
    errors = jsonable_encoder(exc.errors())
    fields = ", ".join(
        ".".join(str(part) for part in error.get("loc", ()) if part not in REQUEST_PARTS)
        for error in errors
    )
    message = f"Invalid request: {fields}" if fields else "Invalid request."
    return error_response(InvalidArgumentError.kind, message, InvalidArgumentError.status_code)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Wrap framework HTTP errors (unknown route, bad method) in the envelope."""
    kind = HTTP_STATUS_KINDS.get(exc.status_code, "internal")
    return error_response(kind, str(exc.detail), exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the traceback and hide the details."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response("internal", "Internal server error", 500)


def register_exception_handlers(app: FastAPI) -> None:
    """Install all exception handlers on the application."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
