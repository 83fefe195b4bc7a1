"""
Configuration management for S.C.O.P.E.

Uses Pydantic Settings for type-safe environment variable loading.
Configured via .env file in project root.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    See .env.example for available options.
    """

    # Python & Application
    python_env: Literal["development", "production"] = Field(
        default="development",
        description="Application environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )

    # Backend selection
    backend_provider: Literal["local", "rest"] = Field(
        default="local",
        description="Row storage backend (local database or hosted REST service)"
    )

    # Database (local backend)
    database_url: str = Field(
        default="sqlite:///./data/scope.db",
        description="Database connection URL"
    )
    account_id: str = Field(
        default="local-account",
        description="Account id used as the session user by the local backend"
    )

    # Hosted REST backend
    rest_url: str = Field(
        default="",
        description="Base URL of the hosted backend (e.g. https://xyz.example.co)"
    )
    rest_api_key: str = Field(
        default="",
        description="Public API key sent with every backend request"
    )
    rest_access_token: str = Field(
        default="",
        description="Access token of the signed-in session"
    )
    rest_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout for backend requests"
    )

    # Client-side snapshot
    state_file: str = Field(
        default="./data/event-staff-storage.json",
        description="Path of the persisted local snapshot blob"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.python_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.python_env == "production"

    @property
    def uses_rest_backend(self) -> bool:
        """Check if the hosted REST backend is the configured provider."""
        return self.backend_provider == "rest"

    @property
    def uses_postgresql(self) -> bool:
        """Check if PostgreSQL is the configured database."""
        return "postgresql" in self.database_url.lower()

    def validate_rest_config(self) -> None:
        """
        Validate hosted backend configuration.

        Raises:
            ValueError: If required settings are missing
        """
        if not self.uses_rest_backend:
            return

        errors = []
        if not self.rest_url:
            errors.append("REST_URL is required when BACKEND_PROVIDER=rest.")
        if not self.rest_api_key:
            errors.append("REST_API_KEY is required when BACKEND_PROVIDER=rest.")

        if errors:
            raise ValueError("Backend configuration errors:\n- " + "\n- ".join(errors))


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure we only load settings once.
    Use this function throughout the application to access settings.

    Returns:
        Settings instance loaded from environment

    Example:
        >>> from src.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.backend_provider)
    """
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the root logger."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
