"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based defaults for the query,
push and trigger paths. Per-invocation values (query string, job name,
credentials) come from the task models; these settings only supply defaults
and scheduler tuning.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with reload_settings()
"""

import tempfile
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prometheus_tasks.core.config.constants import DEFAULT_PROMETHEUS_URL, DEFAULT_PUSHGATEWAY_URL


class Settings(BaseSettings):
    """
    Process-wide settings.

    Usage:
        from prometheus_tasks.core.config import get_settings

        settings = get_settings()
        base_url = settings.PROMETHEUS_URL
    """

    # Endpoints
    PROMETHEUS_URL: str = Field(
        default=DEFAULT_PROMETHEUS_URL, description="Default Prometheus server URL for queries"
    )
    PUSHGATEWAY_URL: str = Field(
        default=DEFAULT_PUSHGATEWAY_URL, description="Default Pushgateway URL for pushes"
    )

    # HTTP
    HTTP_TIMEOUT: float | None = Field(
        default=None, gt=0, description="Default request timeout in seconds (unset: httpx default)"
    )

    # STORE mode
    RESULT_STORAGE_DIR: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "prometheus-tasks",
        description="Directory used by the local file result sink",
    )

    # Triggers and scheduler
    TRIGGER_DEFAULT_INTERVAL: float = Field(
        default=60.0, gt=0, description="Default poll interval in seconds"
    )
    TRIGGER_MIN_INTERVAL: float = Field(
        default=1.0, gt=0, description="Smallest accepted poll interval in seconds"
    )
    TRIGGER_MAX_ATTEMPTS: int = Field(
        default=3, ge=1, le=10, description="Attempts per tick before the tick is abandoned"
    )
    TRIGGER_RETRY_BASE_DELAY: float = Field(
        default=1.0, ge=0, le=60, description="Initial delay between tick retries (seconds)"
    )
    TRIGGER_RETRY_MAX_DELAY: float = Field(
        default=30.0, ge=0, le=600, description="Maximum delay between tick retries (seconds)"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def check_trigger_interval(self):
        """The default interval must respect the minimum interval."""
        if self.TRIGGER_DEFAULT_INTERVAL < self.TRIGGER_MIN_INTERVAL:
            raise ValueError(
                "TRIGGER_DEFAULT_INTERVAL must be greater than or equal to TRIGGER_MIN_INTERVAL"
            )
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
