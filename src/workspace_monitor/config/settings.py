"""
Configuration management for the workspace monitor.

Handles environment variables and configuration file loading, and provides
default settings with validation for the monitoring components.
"""

import logging.config
import sys
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from workspace_monitor.models.exceptions import ConfigurationError

DEFAULT_IGNORED_DIRECTORIES = [".git", "bin", "obj"]


def _default_case_sensitive_paths() -> bool:
    # Default file systems on Windows and macOS compare names case-insensitively.
    return not (sys.platform.startswith("win") or sys.platform == "darwin")


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MonitorConfig(BaseSettings):
    """
    Central configuration class for the workspace monitor.

    Handles all configuration options with environment variable support,
    validation, and sensible defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKSPACE_MONITOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        use_enum_values=True,
    )

    # === Change Tracking Configuration ===
    ignored_directories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_DIRECTORIES),
        description="Directory names excluded from change tracking at any depth",
    )
    case_sensitive_paths: bool = Field(
        default_factory=_default_case_sensitive_paths,
        description="Compare paths case-sensitively when matching known files and expected changes",
    )
    file_encoding: str = Field(default="utf-8", description="Encoding used to read files for content comparison")

    # === Timing Configuration ===
    assessment_timeout_seconds: float | None = Field(
        default=None, gt=0, description="Upper bound for a reload assessment (no limit if None)"
    )
    observer_join_timeout_seconds: float = Field(
        default=5.0, ge=0.1, le=60.0, description="How long to wait for the watcher thread on dispose"
    )

    # === Logging Configuration ===
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path (stderr if None)")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )

    @field_validator('ignored_directories')
    @classmethod
    def validate_ignored_directories(cls, v):
        """Strip separators and reject empty directory names."""
        validated = []
        for name in v:
            cleaned = name.strip().strip("/\\")
            if not cleaned:
                raise ConfigurationError(
                    "ignored directory names must not be empty",
                    config_key="ignored_directories",
                    expected_type="non-empty str",
                    actual_value=name,
                )
            validated.append(cleaned)
        return validated

    def get_log_config(self) -> dict[str, Any]:
        """Get logging configuration dictionary."""
        level = self.log_level.value if isinstance(self.log_level, LogLevel) else self.log_level
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": self.log_format}},
            "handlers": {
                "default": {
                    "level": level,
                    "formatter": "standard",
                    "class": "logging.StreamHandler" if not self.log_file else "logging.FileHandler",
                }
            },
            "loggers": {"workspace_monitor": {"handlers": ["default"], "level": level, "propagate": False}},
        }

        if self.log_file:
            config["handlers"]["default"]["filename"] = str(self.log_file)

        return config


def setup_logging(config: MonitorConfig | None = None) -> None:
    """Apply the logging configuration for the ``workspace_monitor`` loggers."""
    logging.config.dictConfig((config or get_config()).get_log_config())


# Global configuration instance
_config: MonitorConfig | None = None


def get_config() -> MonitorConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call and reuses it for subsequent calls.
    """
    global _config
    if _config is None:
        _config = MonitorConfig()
    return _config


def reload_config() -> MonitorConfig:
    """Force reload the configuration from environment/files."""
    global _config
    _config = MonitorConfig()
    return _config


def set_config(config: MonitorConfig) -> None:
    """
    Set a custom configuration instance.

    Primarily used for testing or embedding scenarios.
    """
    global _config
    _config = config
