"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (or a .env file in dev).
This is the single source of truth for configuration - nothing is hardcoded
elsewhere.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEV = "dev"
    PROD = "prod"
    TEST = "test"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Application
    # ------------------------------------------------------------------ #
    environment: Environment = Environment.DEV
    debug: bool = False

    # ------------------------------------------------------------------ #
    # Database
    # ------------------------------------------------------------------ #
    database_url: str = Field(
        default="sqlite+aiosqlite:///./lifesync.db",
        description="Async SQLAlchemy database URL",
    )
    db_echo_sql: bool = False  # Set True for SQL query logging in dev

    # ------------------------------------------------------------------ #
    # Session tokens
    # ------------------------------------------------------------------ #
    jwt_secret: SecretStr = Field(
        default=SecretStr("dev-only-jwt-secret-not-for-production"),
        description="HMAC secret used to verify session tokens",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Signing algorithm of session tokens",
    )
    access_token_cookie: str = Field(
        default="access_token",
        description="Cookie name carrying the session token",
    )

    # ------------------------------------------------------------------ #
    # CORS
    # ------------------------------------------------------------------ #
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins. In production, set to actual frontend URLs.",
    )

    # ------------------------------------------------------------------ #
    # Self-healing
    # ------------------------------------------------------------------ #
    resurrected_email_domain: str = Field(
        default="lifesync.system",
        description="Email domain used for placeholder user rows recreated after data loss",
    )
    default_area_icon: str = Field(
        default="Activity",
        description="Icon exposed for life areas that have none stored",
    )

    # ------------------------------------------------------------------ #
    # Client sync
    # ------------------------------------------------------------------ #
    notification_retention_days: int = Field(default=30, ge=1)
    sync_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the sync API used by the client dispatcher",
    )
    sync_max_attempts: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Delivery attempts per queued command before giving up",
    )
    sync_retry_backoff_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Base delay for exponential backoff between delivery attempts",
    )
    sync_request_timeout_seconds: float = Field(default=10.0, gt=0)

    # ------------------------------------------------------------------ #
    # Derived / Computed
    # ------------------------------------------------------------------ #
    @model_validator(mode="after")
    def _set_debug_from_env(self) -> Settings:
        if self.environment == Environment.DEV:
            self.debug = True
        return self

    @model_validator(mode="after")
    def _validate_production_secrets(self) -> Settings:
        """Refuse to start in production with the development token secret."""
        if self.environment != Environment.PROD:
            return self

        _insecure_tokens: set[str] = {
            "changeme",
            "secret",
            "default",
            "password",
            "dev-only-jwt-secret-not-for-production",
        }

        jwt_val = self.jwt_secret.get_secret_value().lower()
        if any(token in jwt_val for token in _insecure_tokens):
            raise RuntimeError(
                "PRODUCTION STARTUP BLOCKED -- Insecure secrets detected:\n"
                "  - JWT_SECRET contains an insecure default value. "
                "Set a strong, random secret for production."
            )

        return self

    @property
    def is_dev(self) -> bool:
        return self.environment in (Environment.DEV, Environment.TEST)

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PROD


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings singleton.

    Use FastAPI dependency injection via Depends(get_settings) in endpoints,
    or call directly in non-request contexts (startup, scripts).
    """
    return Settings()
