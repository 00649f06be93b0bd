# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides health and readiness endpoints for the API.
"""

import logging
import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from src.core.config import get_settings
from src.infrastructure.database.connection import check_database_connection
from src.infrastructure.database.migrations.runner import get_migration_status
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class ComponentsHealth(BaseModel):
    """All components health status."""
    database: ComponentHealth | None = None
    email: ComponentHealth | None = None


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    checked_at: datetime = Field(description="When health was checked")
    components: ComponentsHealth = Field(default_factory=ComponentsHealth)


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, Any] = Field(description="Individual check results")


async def check_database() -> ComponentHealth:
    """Check the database connection."""
    start = time.time()
    if not await check_database_connection():
        logger.error("Database health check failed")
        return ComponentHealth(status="unhealthy", message="Database is not reachable")

    latency = (time.time() - start) * 1000
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


def check_email() -> ComponentHealth:
    """Report whether SMTP delivery is configured."""
    if get_settings().email.is_configured:
        return ComponentHealth(status="configured")
    return ComponentHealth(
        status="disabled",
        message="SMTP is not configured; emails are skipped",
    )


async def check_migrations() -> dict[str, Any]:
    """Check that the schema is at the latest revision."""
    try:
        migration_status = await get_migration_status(get_settings().database.url)
    except Exception as e:
        logger.error("Migration status check failed: %s", e)
        return {"status": "unhealthy", "message": str(e)}

    return {
        "status": "healthy" if migration_status["is_up_to_date"] else "pending",
        "current_version": migration_status["current_version"],
        "pending_migrations": migration_status["pending_migrations"],
    }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check if the API is healthy with component details.

    Returns:
        HealthResponse with detailed status.
    """
    settings = get_settings()
    uptime = int(time.time() - _server_start_time)

    db_health = await check_database()
    email_health = check_email()

    return HealthResponse(
        status="healthy" if db_health.status == "healthy" else "unhealthy",
        version="1.0.0",
        environment=settings.environment,
        uptime_seconds=uptime,
        checked_at=utc_now(),
        components=ComponentsHealth(database=db_health, email=email_health),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(response: Response) -> ReadinessResponse:
    """Check if the API is ready to accept traffic.

    Ready means the database answers and no migration is pending.

    Returns:
        ReadinessResponse with individual check results; 503 when not ready.
    """
    checks: dict[str, Any] = {}

    db_health = await check_database()
    checks["database"] = {"status": db_health.status, "latency_ms": db_health.latency_ms}

    checks["migrations"] = await check_migrations()

    ready = db_health.status == "healthy" and checks["migrations"]["status"] == "healthy"
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(ready=ready, checks=checks)
