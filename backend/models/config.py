import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so `SECRET_KEY` can be
    provided from `backend/.env`. **SECRET_KEY remains required** and must be
    set in production via environment variables.

    Do NOT auto-load `.env` when running under pytest or in CI.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', 'production' or 'test'",
    )

    DATABASE_URL: str = "sqlite:///./data/crewlink.db"
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="JWT secret key - must be set via SECRET_KEY environment variable",
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=30 * 24 * 60,
        description="Lifetime of issued access tokens (30 days)",
    )
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:5000"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Throttle login, merge and reset endpoints per client address",
    )

    # Identifier normalization
    PHONE_COUNTRY_CODE: str = Field(
        default="91",
        description="Country calling code used to expand phone identifiers",
    )
    PHONE_NATIONAL_LENGTH: int = Field(
        default=10,
        description="Number of digits in a national phone number",
    )

    # Merge sessions
    MERGE_SESSION_TTL_MINUTES: int = Field(
        default=30,
        description="Minutes a merge session stays readable after creation",
    )

    # Password gate
    PASSWORD_MIN_LENGTH: int = Field(
        default=6,
        description="Minimum length of an explicitly set password",
    )
    LIBERAL_PASSWORD: str = Field(
        default="1234koihai",
        description="Reserved bootstrap token; never accepted as a custom password",
    )
    RESET_CODE_EXPIRY_MINUTES: int = Field(
        default=15,
        description="Minutes until a password reset code expires",
    )
    RESET_CODE_LENGTH: int = Field(
        default=6,
        description="Number of digits in a password reset code",
    )
    EXPOSE_RESET_CODE: bool = Field(
        default=False,
        description="Return the reset code in the forgot-password response (development aid)",
    )

    # Reset code delivery
    NOTIFIER_PROVIDER: str = Field(
        default="console",
        description="Reset code delivery: 'console' (log only) or 'webhook'",
    )
    NOTIFIER_WEBHOOK_URL: str = Field(
        default="",
        description="Endpoint that relays reset codes to WhatsApp/SMS/email",
    )
    NOTIFIER_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="HTTP timeout for the webhook notifier",
    )

    # Admin bootstrap (init_db.py)
    ADMIN_ACCOUNT_ID: str = Field(
        default="",
        description="Account id created or promoted to platform admin by init_db",
    )
    ADMIN_PASSWORD: str = Field(
        default="",
        description="Initial password for a newly created admin account",
    )

    # Logging
    LOG_DIR: str = Field(
        default="logs",
        description="Directory for rotating log files",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("PHONE_COUNTRY_CODE")
    @classmethod
    def validate_country_code(cls, v: str) -> str:
        """Country code is stored without the leading '+'."""
        v = v.strip().lstrip("+")
        if not v.isdigit():
            raise ValueError("PHONE_COUNTRY_CODE must contain digits only")
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


# Instantiating Settings() raises pydantic.ValidationError if SECRET_KEY isn't set.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
