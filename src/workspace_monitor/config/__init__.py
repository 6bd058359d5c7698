"""Configuration management and settings."""

from workspace_monitor.config.settings import (
    DEFAULT_IGNORED_DIRECTORIES,
    LogLevel,
    MonitorConfig,
    get_config,
    reload_config,
    set_config,
    setup_logging,
)

__all__ = [
    "DEFAULT_IGNORED_DIRECTORIES",
    "LogLevel",
    "MonitorConfig",
    "get_config",
    "reload_config",
    "set_config",
    "setup_logging",
]
