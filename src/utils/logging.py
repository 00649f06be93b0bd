# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging configuration using structlog.

Logs are rendered as JSON in production and as colored console output in
development. Standard library loggers (``logging.getLogger(__name__)``) used
throughout the services are routed through the same structlog processor
chain, so request-scoped context bound with bind_context() shows up on
every line.

Example:
    >>> import logging
    >>> from src.utils.logging import setup_logging
    >>> from src.core.config import get_settings
    >>> setup_logging(get_settings())
    >>> logging.getLogger(__name__).info("Point sheet recorded for %s", student_id)
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from src.core.config.settings import Settings

# Third-party loggers kept at WARNING to reduce noise
NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "sqlalchemy",
    "aiosmtplib",
    "asyncio",
)


def setup_logging(settings: "Settings") -> None:
    """Configure structured logging for the application.

    Args:
        settings: Application settings containing log_level and debug flag.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: Processor
    if settings.is_development or settings.debug:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib records through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("src").setLevel(log_level)


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log calls in this context.

    Used for request-scoped information like request_id or principal_id.

    Args:
        **kwargs: Key-value pairs to bind to the logging context.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables.

    Called at the end of request processing to prevent context leakage
    between requests.
    """
    structlog.contextvars.clear_contextvars()
