"""Keep an in-memory workspace model in sync with the file system."""

from workspace_monitor.config import MonitorConfig, get_config, setup_logging
from workspace_monitor.core import IFileMonitoringService
from workspace_monitor.models import ConfigurationError, MonitoringError
from workspace_monitor.monitoring import ChangeSession, FileMonitoringService, is_path_ignored

__version__ = "0.1.0"

__all__ = [
    "ChangeSession",
    "ConfigurationError",
    "FileMonitoringService",
    "IFileMonitoringService",
    "MonitorConfig",
    "MonitoringError",
    "get_config",
    "is_path_ignored",
    "setup_logging",
]
