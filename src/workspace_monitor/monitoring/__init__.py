"""
Monitoring package for workspace change detection.

This package provides the change session, which watches a directory tree and
decides whether a loaded workspace is stale, and the service that owns the
current session.
"""

from .change_session import ChangeSession
from .monitoring_service import FileMonitoringService
from .path_filter import is_path_ignored

__all__ = [
    "ChangeSession",
    "FileMonitoringService",
    "is_path_ignored",
]
