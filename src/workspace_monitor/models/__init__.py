"""Data models and exceptions for the workspace monitor."""

from workspace_monitor.models.change import ChangeKind, FileChangeEvent, SessionState
from workspace_monitor.models.exceptions import BaseError, ConfigurationError, MonitoringError

__all__ = [
    "ChangeKind",
    "FileChangeEvent",
    "SessionState",
    "BaseError",
    "ConfigurationError",
    "MonitoringError",
]
