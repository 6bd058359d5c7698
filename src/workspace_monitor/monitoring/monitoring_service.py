"""
Monitoring service owning at most one change session.

The service is what the rest of an application holds on to: the workspace
loader starts and stops monitoring through it, writers register expected
changes through it, and whoever serves requests asks it whether the loaded
model is still current.
"""

import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from workspace_monitor.config.settings import MonitorConfig, get_config
from workspace_monitor.core.interfaces import IFileMonitoringService
from workspace_monitor.monitoring.change_session import ChangeSession

logger = logging.getLogger(__name__)


class FileMonitoringService(IFileMonitoringService):
    """
    Lifecycle wrapper that makes a change session safe to swap and query.

    ``_lock`` guards only the reference to the current session. It is never
    held while calling into a session: sessions take their own lock and may
    block on file reads, so a thread stopping monitoring must not wait behind
    a thread assessing reload necessity.
    """

    def __init__(self, config: MonitorConfig | None = None):
        """
        Initialize the monitoring service.

        Args:
            config: Monitor configuration (process default if None)
        """
        self.config = config or get_config()
        self._lock = threading.Lock()
        self._session: ChangeSession | None = None

    def start_monitoring(self, directory: str | Path) -> None:
        """
        Start a fresh session watching ``directory``, replacing any current one.

        Args:
            directory: Root directory to watch recursively

        Raises:
            MonitoringError: If the watcher cannot be started
        """
        logger.info("Starting file monitoring for directory: %s", directory)

        self._dispose_session(self._swap_session(None))

        session = ChangeSession(directory, config=self.config)

        # A concurrent start may have installed its own session meanwhile.
        self._dispose_session(self._swap_session(session))

    def stop_monitoring(self) -> None:
        """Disable and dispose the current session, if any."""
        session = self._swap_session(None)
        if session is None:
            logger.debug("Monitoring not active, nothing to stop")
            return

        logger.info("Stopping file monitoring")
        session.disable()
        self._dispose_session(session)

    def set_known_file_paths(self, file_paths: Iterable[str | Path]) -> None:
        """
        Provide the set of files that make up the loaded workspace.

        Does nothing when monitoring is not active.

        Raises:
            ConfigurationError: If the current session already has its known files
        """
        session = self._current_session()
        if session is not None:
            session.set_known_file_paths(file_paths)

    def register_expected_change(self, file_path: str | Path, file_contents: str) -> None:
        """Register the content about to be written to ``file_path``. No-op without a session."""
        session = self._current_session()
        if session is not None:
            session.register_expected_change(file_path, file_contents)

    async def assess_if_reload_necessary(self, timeout: float | None = None) -> bool:
        """
        Decide whether the loaded workspace must be reloaded.

        Without an active session nothing vouches for the loaded state, so the
        answer is True.

        Args:
            timeout: Seconds to spend comparing files (configured default if None)

        Returns:
            True if a reload is necessary
        """
        session = self._current_session()
        if session is None:
            return True
        return await session.assess_if_reload_necessary(timeout=timeout)

    @property
    def change_count(self) -> int:
        """Change notifications seen by the current session (0 without one)."""
        session = self._current_session()
        return session.change_count if session is not None else 0

    @property
    def is_monitoring(self) -> bool:
        """Check if a session is currently active."""
        return self._current_session() is not None

    def get_monitoring_stats(self) -> dict[str, Any]:
        """
        Get monitoring statistics.

        Returns:
            Dictionary with monitoring statistics
        """
        session = self._current_session()
        return {
            "monitoring_active": session is not None,
            "session": session.get_status() if session is not None else None,
            "configuration": {
                "ignored_directories": list(self.config.ignored_directories),
                "case_sensitive_paths": self.config.case_sensitive_paths,
                "assessment_timeout_seconds": self.config.assessment_timeout_seconds,
            },
        }

    def close(self) -> None:
        """Stop monitoring and release the watcher."""
        self.stop_monitoring()

    def __enter__(self) -> "FileMonitoringService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _current_session(self) -> ChangeSession | None:
        with self._lock:
            return self._session

    def _swap_session(self, session: ChangeSession | None) -> ChangeSession | None:
        with self._lock:
            previous = self._session
            self._session = session
            return previous

    @staticmethod
    def _dispose_session(session: ChangeSession | None) -> None:
        if session is not None:
            session.dispose()
