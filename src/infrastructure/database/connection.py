# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management using SQLAlchemy async.

The roster store is a single PostgreSQL database reached through the
asyncpg driver. A SQLite URL (aiosqlite) is accepted for local runs.

Example:
    from src.infrastructure.database.connection import init_database, get_session

    # Initialize at application startup
    await init_database(settings)

    # Use outside request handlers
    async with get_session() as session:
        result = await session.execute(select(School))
        schools = result.scalars().all()
"""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from src.core.config.settings import Settings

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


class DatabaseError(Exception):
    """Base exception for database operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


def _engine_options(settings: "Settings") -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.debug and settings.is_development}
    if not settings.database.is_sqlite:
        options.update(
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
    return options


async def init_database(settings: "Settings") -> None:
    """Initialize the connection pool.

    Args:
        settings: Application settings containing database configuration.

    Raises:
        DatabaseError: If connection pool creation fails.
    """
    global _engine, _sessionmaker

    try:
        _engine = create_async_engine(settings.database.url, **_engine_options(settings))
        _sessionmaker = async_sessionmaker(
            bind=_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to initialize database connection", e) from e

    logger.info("Database engine initialized (%s)", _engine.url.render_as_string(hide_password=True))


async def close_database() -> None:
    """Dispose of the connection pool."""
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _sessionmaker is None:
        raise DatabaseError("Database not initialized. Call init_database() first.")
    return _sessionmaker


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Get an async session scoped to one unit of work.

    The session is committed on success and rolled back on exception.
    Services that commit themselves leave nothing pending, so the final
    commit is a no-op for them.

    Yields:
        AsyncSession for database operations.

    Raises:
        DatabaseError: If a database operation fails.
    """
    sessionmaker = get_sessionmaker()

    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise DatabaseError("Database operation failed", e) from e
        except Exception:
            await session.rollback()
            raise


async def check_database_connection() -> bool:
    """Check if the database is reachable.

    Returns:
        True if a trivial query succeeds, False otherwise.
    """
    if _engine is None:
        return False

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database connectivity check failed: %s", e)
        return False
