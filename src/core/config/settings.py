# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for RiseTrack.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-in-production"


class DatabaseSettings(BaseSettings):
    """Database configuration for the roster store.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        url_override: Full connection URL; takes precedence over components.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        auto_migrate: Apply pending migrations at application startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "risetrack"
    password: SecretStr = SecretStr("risetrack_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "risetrack"
    url_override: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
    )
    pool_size: int = 10
    max_overflow: int = 20
    auto_migrate: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured URL targets SQLite."""
        return self.url.startswith("sqlite")


class JWTSettings(BaseSettings):
    """JWT authentication configuration.

    Attributes:
        secret_key: Secret key for signing tokens.
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Access token expiration time.
        refresh_token_expire_days: Refresh token expiration time.
        action_token_expire_minutes: Lifetime of password-reset and
            email-verification links.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=30,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    refresh_token_expire_days: int = Field(
        default=7,
        validation_alias="REFRESH_TOKEN_EXPIRE_DAYS",
    )
    action_token_expire_minutes: int = Field(
        default=60 * 24,
        validation_alias="ACTION_TOKEN_EXPIRE_MINUTES",
    )


class EmailSettings(BaseSettings):
    """SMTP configuration for transactional email.

    Email is considered configured only when host, username, password and
    sender address are all set. Unconfigured email is skipped, not failed.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port.
        username: SMTP authentication username.
        password: SMTP authentication password.
        use_tls: Use STARTTLS.
        from_email: Sender email address.
        from_name: Sender display name.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore",
    )

    host: str | None = None
    port: int = 587
    username: str | None = None
    password: SecretStr | None = None
    use_tls: bool = True
    from_email: str | None = None
    from_name: str = "RiseTrack"

    @property
    def is_configured(self) -> bool:
        """Check whether all required SMTP settings are present."""
        return all([self.host, self.username, self.password, self.from_email])


class ProgramSettings(BaseSettings):
    """Point-sheet processing configuration.

    Attributes:
        max_attempts: Attempts made when a concurrent submission for the
            same student wins the optimistic-concurrency race.
        allow_multiple_daily_reports: Count every submission as a new day.
            When False, a second report for the same student on the same
            UTC calendar day is rejected.
    """

    model_config = SettingsConfigDict(
        env_prefix="POINT_SHEET_",
        extra="ignore",
    )

    max_attempts: int = Field(default=3, ge=1)
    allow_multiple_daily_reports: bool = True


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    Attributes:
        requests_per_minute: Maximum requests per minute per client.
        auth_requests_per_minute: Limit applied to login/signup/reset endpoints.
        enabled: Whether limits are enforced.
        storage_uri: slowapi storage backend, in-process memory by default.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    requests_per_minute: int = 60
    auth_requests_per_minute: int = 10
    enabled: bool = True
    storage_uri: str = "memory://"


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        workers: Number of worker processes.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 2
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        app_name: Program name used in emails and the API title.
        frontend_url: Base URL of the web client, used for action links.
        database: Database settings.
        jwt: JWT authentication settings.
        email: SMTP settings.
        program: Point-sheet processing settings.
        rate_limit: Rate limiting settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    app_name: str = "Behavior Management System"
    frontend_url: str = "http://localhost:3000"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    program: ProgramSettings = Field(default_factory=ProgramSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.jwt.secret_key.get_secret_value() == DEFAULT_JWT_SECRET:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
