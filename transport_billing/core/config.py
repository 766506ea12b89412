"""
transport_billing/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (backend URL, storage path, cache windows)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import List, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Backend REST API
    API_BASE_URL: str = Field(
        default="http://localhost:5000",
        description="Transport billing backend base URL"
    )
    API_TIMEOUT: float = Field(
        default=30.0,
        description="Backend request timeout in seconds"
    )

    # Local web surface
    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Public URL of this app (decides the Secure cookie flag)"
    )
    PROTECTED_PATHS: List[str] = Field(
        default=["/dashboard", "/profile", "/entry", "/analysis", "/reports"],
        description="Path prefixes that require an auth_token cookie"
    )

    # Local persisted state
    STORAGE_PATH: str = Field(
        default=".transport_billing/storage.json",
        description="JSON file backing the persistent key-value store"
    )
    SESSION_CACHE_TTL_MINUTES: int = Field(
        default=5,
        description="Minutes a cached user snapshot is served without revalidation"
    )
    TOKEN_COOKIE_DAYS: int = Field(
        default=7,
        description="Lifetime of the auth_token cookie mirror in days"
    )

    # Entry views
    ENTRY_FETCH_LIMIT: int = Field(
        default=1000,
        description="Entries fetched for dashboard, analysis and reports"
    )
    ENTRY_PAGE_SIZE: int = Field(
        default=10,
        description="Entries fetched for the entry list view"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @validator("API_BASE_URL", "APP_URL")
    def strip_trailing_slash(cls, v):
        """Endpoints are joined as base + '/api/...'."""
        return v.rstrip("/")

    @validator("SESSION_CACHE_TTL_MINUTES", "TOKEN_COOKIE_DAYS")
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be a positive number")
        return v

    @validator("APP_URL")
    def validate_https_in_production(cls, v, values):
        """Ensure the cookie mirror is Secure in production."""
        if values.get("ENVIRONMENT") == "production" and not v.startswith("https://"):
            raise ValueError("APP_URL must use https in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def cookie_secure(self) -> bool:
        """Secure flag for the token cookie, set iff served over HTTPS."""
        return self.APP_URL.startswith("https://")

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.API_BASE_URL:
        errors.append("API_BASE_URL is required")

    if not settings.STORAGE_PATH:
        errors.append("STORAGE_PATH is required")

    if settings.ENTRY_FETCH_LIMIT < settings.ENTRY_PAGE_SIZE:
        errors.append("ENTRY_FETCH_LIMIT must not be smaller than ENTRY_PAGE_SIZE")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
