"""Configuration management for DriverDesk.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DRIVERDESK_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "DriverDesk"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    external_url: str = "http://localhost:5173"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./dd_data/driverdesk.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Security Settings
    secret_key: str = Field(
        default="change-me-in-production-use-openssl-rand-hex-32",
        description="Secret key for JWT token signing",
    )
    access_token_expire_minutes: int = 60

    # CORS Settings
    cors_origins: list[str] = Field(default=["http://localhost:5173", "http://localhost:8000"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Invitation Settings
    invitation_expiry_days: int = 7
    invitation_token_bytes: int = 32
    onboarding_path: str = "/onboarding"

    # Invitation Rate Limiting (fixed window per inviter and company)
    invitation_rate_limit_per_hour: int = 10
    invitation_rate_limit_window_seconds: int = 3600

    # Driver Input Validation
    disposable_email_domains: list[str] = Field(
        default=["10minutemail", "tempmail", "guerrillamail", "mailinator"]
    )
    hourly_rate_ceiling: Decimal = Decimal("1000")
    per_unit_rate_ceiling: Decimal = Decimal("50")

    # Direct Provisioning
    default_parcel_rate: Decimal = Decimal("0.75")
    default_cover_rate: Decimal = Decimal("1.0")
    temporary_password_length: int = 12

    # Security Audit Trail
    audit_write_attempts: int = 2

    # Email Settings
    email_provider: Literal["console", "resend", "smtp"] = "console"
    email_from_address: str = "noreply@driverdesk.local"
    email_from_name: str = "Driver Portal"
    email_reply_to: str | None = None
    resend_api_key: str | None = None
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_timeout: int = 10

    @field_validator("cors_origins", "disposable_email_domains", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | list[str]) -> list[str]:
        """Parse list settings from a comma-separated string or list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("invitation_rate_limit_per_hour", "audit_write_attempts")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counts and attempts must be at least 1."""
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self

    @model_validator(mode="after")
    def validate_email_provider(self) -> "Settings":
        """Validate that the selected email provider is fully configured."""
        if self.email_provider == "resend" and not self.resend_api_key:
            raise ValueError("email_provider=resend requires resend_api_key")
        if self.email_provider == "smtp" and not self.smtp_host:
            raise ValueError("email_provider=smtp requires smtp_host")
        return self

    @property
    def database_url_sync(self) -> str:
        """Get synchronous database URL for migrations."""
        url = self.database_url
        if url.startswith("sqlite+aiosqlite"):
            return url.replace("sqlite+aiosqlite", "sqlite")
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql")
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
