"""Core contracts of the workspace monitor."""

from workspace_monitor.core.interfaces import IFileMonitoringService

__all__ = ["IFileMonitoringService"]
