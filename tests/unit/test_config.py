"""
Unit tests for src/config.py

Tests Settings defaults, environment variable loading, backend
configuration validation, caching and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError

from src.config import Settings, configure_logging, get_settings

ENV_VARS = (
    "PYTHON_ENV",
    "LOG_LEVEL",
    "BACKEND_PROVIDER",
    "DATABASE_URL",
    "ACCOUNT_ID",
    "REST_URL",
    "REST_API_KEY",
    "REST_ACCESS_TOKEN",
    "REST_TIMEOUT_SECONDS",
    "STATE_FILE",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every setting from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsDefaults:
    """Test Settings initialization with default values."""

    def test_settings_defaults(self, clean_env):
        """Settings should initialize with correct default values."""
        settings = Settings(_env_file=None)

        assert settings.python_env == "development"
        assert settings.log_level == "INFO"
        assert settings.backend_provider == "local"
        assert settings.database_url == "sqlite:///./data/scope.db"
        assert settings.account_id == "local-account"
        assert settings.rest_url == ""
        assert settings.rest_api_key == ""
        assert settings.rest_timeout_seconds == 10.0
        assert settings.state_file == "./data/event-staff-storage.json"

    def test_is_development_default(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.is_development is True
        assert settings.is_production is False
        assert settings.uses_rest_backend is False

    def test_uses_postgresql(self):
        assert Settings(_env_file=None, database_url="postgresql://db/scope").uses_postgresql
        assert not Settings(_env_file=None, database_url="sqlite:///x.db").uses_postgresql


class TestSettingsEnvironmentVariables:
    """Test Settings loading from environment variables."""

    def test_settings_from_env_vars(self, clean_env):
        """Settings should load values from environment variables."""
        clean_env.setenv("PYTHON_ENV", "production")
        clean_env.setenv("LOG_LEVEL", "DEBUG")
        clean_env.setenv("BACKEND_PROVIDER", "rest")
        clean_env.setenv("REST_URL", "https://scope.example.co")
        clean_env.setenv("REST_API_KEY", "anon-key")
        clean_env.setenv("REST_TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.is_production is True
        assert settings.log_level == "DEBUG"
        assert settings.uses_rest_backend is True
        assert settings.rest_url == "https://scope.example.co"
        assert settings.rest_api_key == "anon-key"
        assert settings.rest_timeout_seconds == 2.5

    def test_settings_case_insensitive(self, clean_env):
        """Environment variable names are case-insensitive, values are not."""
        clean_env.setenv("backend_provider", "rest")

        settings = Settings(_env_file=None)

        assert settings.backend_provider == "rest"


class TestSettingsValidation:
    """Test Settings field validation."""

    def test_invalid_backend_provider(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None, backend_provider="firebase")

        assert exc_info.value.errors()[0]["type"] == "literal_error"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="INVALID")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, rest_timeout_seconds=0)


class TestValidateRestConfig:
    """Test validate_rest_config()."""

    def test_local_backend_needs_nothing(self, clean_env):
        Settings(_env_file=None).validate_rest_config()

    def test_rest_backend_complete(self):
        settings = Settings(
            _env_file=None,
            backend_provider="rest",
            rest_url="https://scope.example.co",
            rest_api_key="anon-key",
        )
        settings.validate_rest_config()

    def test_rest_backend_missing_values(self, clean_env):
        settings = Settings(_env_file=None, backend_provider="rest")

        with pytest.raises(ValueError) as exc_info:
            settings.validate_rest_config()

        message = str(exc_info.value)
        assert "REST_URL is required" in message
        assert "REST_API_KEY is required" in message


class TestGetSettingsCaching:
    """Test get_settings() and its LRU cache."""

    def test_get_settings_cached(self):
        get_settings.cache_clear()

        assert get_settings() is get_settings()
        assert isinstance(get_settings(), Settings)

    def test_get_settings_cache_clear(self):
        get_settings.cache_clear()
        get_settings()
        get_settings.cache_clear()
        get_settings()

        assert get_settings.cache_info().currsize == 1


class TestConfigureLogging:
    """Test configure_logging()."""

    def test_applies_level(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

        configure_logging(Settings(_env_file=None, log_level="WARNING"))

        assert captured["level"] == logging.WARNING
