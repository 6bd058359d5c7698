"""
Abstract interfaces for the workspace monitor.

These interfaces define the contracts consumed by workspace loaders and
writers, enabling dependency injection and test doubles.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path


class IFileMonitoringService(ABC):
    """Interface for tracking external changes to a loaded workspace."""

    @abstractmethod
    def start_monitoring(self, directory: str | Path) -> None:
        """
        Start monitoring a directory for file changes.

        Args:
            directory: Directory to monitor recursively

        Raises:
            MonitoringError: If monitoring cannot be started
        """
        pass

    @abstractmethod
    def stop_monitoring(self) -> None:
        """Stop monitoring."""
        pass

    @abstractmethod
    def set_known_file_paths(self, file_paths: Iterable[str | Path]) -> None:
        """
        Provide the set of files that are part of the loaded workspace.

        Reconciles any changes that happened while the workspace was loading.

        Args:
            file_paths: Absolute paths of known files

        Raises:
            ConfigurationError: If called twice for the same monitoring session
        """
        pass

    @abstractmethod
    def register_expected_change(self, file_path: str | Path, file_contents: str) -> None:
        """
        Register a change the caller is about to make itself.

        Args:
            file_path: File that will be written
            file_contents: Content the file will hold after the write
        """
        pass

    @abstractmethod
    async def assess_if_reload_necessary(self, timeout: float | None = None) -> bool:
        """
        Check whether the workspace must be reloaded due to external changes.

        Args:
            timeout: Optional upper bound in seconds for the assessment

        Returns:
            True if a reload is necessary
        """
        pass

    @property
    @abstractmethod
    def change_count(self) -> int:
        """Number of change notifications observed by the current session."""
        pass
