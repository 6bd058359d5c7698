"""
Change session: one watch-and-reconcile episode rooted at a directory.

A session watches its root recursively and remembers which files changed.
The owner tells it once which files it cares about, registers the content it
expects its own writes to produce, and asks whether its in-memory model is
stale. A session that has answered "reload" once is finished; the owner
starts a new one after reloading.
"""

import asyncio
import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from workspace_monitor.config.settings import MonitorConfig, get_config
from workspace_monitor.models import ChangeKind, FileChangeEvent, MonitoringError, SessionState
from workspace_monitor.models.exceptions import raise_config_error
from workspace_monitor.monitoring.path_filter import is_nested_under, is_path_ignored, path_key

logger = logging.getLogger(__name__)


def _read_text(file_path: str, encoding: str) -> str:
    # newline="" keeps line endings as they are on disk
    with open(file_path, encoding=encoding, newline="") as f:
        return f.read()


class ChangeSession(FileSystemEventHandler):
    """
    Watches a directory tree and decides whether its owner must reload.

    The session moves through three phases:

    1. Before ``set_known_file_paths`` every observed change goes into a
       backlog, since the owner does not yet know which files matter.
    2. ``set_known_file_paths`` reconciles the backlog against the known set
       and clears it.
    3. Afterwards, changes to known files are checked against registered
       expected changes when ``assess_if_reload_necessary`` runs. A clean
       verdict drops the changes it evaluated.

    Watchdog delivers events on its own thread. Every piece of bookkeeping is
    guarded by ``_lock``; file reads during assessment happen after the lock
    is released.
    """

    def __init__(self, root: str | Path, config: MonitorConfig | None = None):
        """
        Start watching a directory.

        Args:
            root: Directory to watch recursively
            config: Monitor configuration (process default if None)

        Raises:
            MonitoringError: If the directory is missing or the watcher cannot start
        """
        super().__init__()
        self.config = config or get_config()
        self._root = os.path.abspath(os.fsdecode(root))
        self._case_sensitive = self.config.case_sensitive_paths

        self._lock = threading.Lock()
        self._state = SessionState.TRACKING
        self._reload_necessary = False
        self._change_count = 0

        self._known_file_paths: set[str] | None = None
        self._changed_files: list[FileChangeEvent] = []
        self._expected_changes: dict[str, str] = {}

        self._observer: Observer | None = None
        self._start_observer()

    def _start_observer(self) -> None:
        if not os.path.exists(self._root):
            raise MonitoringError(f"Directory does not exist: {self._root}", path=self._root, operation="start_session")

        if not os.path.isdir(self._root):
            raise MonitoringError(f"Path is not a directory: {self._root}", path=self._root, operation="start_session")

        try:
            observer = Observer()
            observer.schedule(self, self._root, recursive=True)
            observer.start()
        except Exception as e:
            logger.error("Failed to start file watcher for %s: %s", self._root, e)
            raise MonitoringError(
                f"Failed to start monitoring: {e}",
                path=self._root,
                operation="start_session",
                underlying_error=e,
            ) from e

        self._observer = observer
        logger.info("Started monitoring %s", self._root)

    # --- Owner API -------------------------------------------------------

    def set_known_file_paths(self, file_paths: Iterable[str | Path]) -> None:
        """
        Provide the definitive set of files the owner cares about.

        Any backlog entry for one of these files means it changed while the
        owner was still loading, so a reload becomes necessary. The backlog is
        cleared either way.

        Args:
            file_paths: Absolute paths of known files

        Raises:
            ConfigurationError: If called more than once on this session
        """
        keys = {path_key(p, self._case_sensitive) for p in file_paths}

        with self._lock:
            if self._known_file_paths is not None:
                raise_config_error(
                    "set_known_file_paths should only be called once per session",
                    config_key="known_file_paths",
                    actual_value=f"{len(self._known_file_paths)} files already set",
                )

            logger.info("Setting known file paths: %d files", len(keys))
            self._known_file_paths = keys

            if any(self._affects_known_files(event, keys) for event in self._changed_files):
                self._reload_necessary = True
                logger.warning("Known file changed while the workspace was loading")

            self._changed_files.clear()

    def register_expected_change(self, file_path: str | Path, file_contents: str) -> None:
        """Record the content the owner expects ``file_path`` to hold after its own write."""
        key = path_key(file_path, self._case_sensitive)
        with self._lock:
            logger.debug("Registering expected change to %s", file_path)
            self._expected_changes[key] = file_contents

    async def assess_if_reload_necessary(self, timeout: float | None = None) -> bool:
        """
        Decide whether the owner's model is stale.

        Reads files when expected changes need to be compared, but never while
        holding the session lock. A True verdict is final: the session
        disables itself before returning.

        Args:
            timeout: Seconds to spend comparing files (configured default if None);
                running out of time counts as a reload

        Returns:
            True if the owner must reload
        """
        if timeout is None:
            timeout = self.config.assessment_timeout_seconds

        expected_changes: dict[str, str] = {}
        known_file_paths: set[str] = set()
        changed_files: list[FileChangeEvent] = []
        known_files_set = False

        with self._lock:
            need_reload = self._reload_necessary

            if not need_reload and self._state is SessionState.TRACKING and not self._watcher_alive():
                logger.error("File watcher for %s stopped unexpectedly", self._root)
                need_reload = True

            if not need_reload:
                expected_changes = dict(self._expected_changes)
                known_file_paths = set(self._known_file_paths or ())
                changed_files = list(self._changed_files)
                known_files_set = self._known_file_paths is not None

        if not need_reload:
            assessment = self._assess_changes(expected_changes, known_file_paths, changed_files)
            try:
                if timeout is not None:
                    need_reload = await asyncio.wait_for(assessment, timeout)
                else:
                    need_reload = await assessment
            except asyncio.TimeoutError:
                logger.warning("Reload assessment for %s timed out after %.1fs", self._root, timeout)
                need_reload = True

        if not need_reload and known_files_set:
            # Entries appended after the snapshot stay for the next assessment.
            with self._lock:
                del self._changed_files[:len(changed_files)]

        if need_reload:
            # Nothing left to track once a reload is due.
            self.disable()

        return need_reload

    async def _assess_changes(
        self,
        expected_changes: dict[str, str],
        known_file_paths: set[str],
        changed_files: list[FileChangeEvent],
    ) -> bool:
        seen: set[str] = set()

        for event in changed_files:
            key = self._key(event.file_path)
            if key in seen:
                continue
            seen.add(key)

            logger.debug("Assessing %s", event)

            if event.is_directory and event.change_kind is ChangeKind.DELETED:
                if self._affects_known_files(event, known_file_paths):
                    logger.warning("Directory %s holding known files was deleted", event.file_path)
                    return True
                continue

            if key not in known_file_paths:
                continue

            if not os.path.exists(event.file_path):
                logger.warning("Known file %s was deleted", event.file_path)
                return True

            if key not in expected_changes:
                logger.warning("Unexpected file change for %s", event.file_path)
                return True

            try:
                actual_content = await asyncio.to_thread(_read_text, event.file_path, self.config.file_encoding)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Error reading file %s for comparison: %s", event.file_path, e)
                return True

            if actual_content != expected_changes[key]:
                logger.warning("File content mismatch for %s", event.file_path)
                return True

        return False

    def disable(self) -> None:
        """
        Stop tracking. Idempotent.

        Events arriving afterwards are dropped and the reload flag stays set.
        Taking the lock waits for any callback already in progress.
        """
        observer = self._observer
        if observer is not None:
            observer.stop()

        with self._lock:
            if self._state is SessionState.TRACKING:
                logger.info("Disabling change tracking for %s", self._root)
            self._state = SessionState.DISABLED
            self._reload_necessary = True

    def dispose(self) -> None:
        """
        Release the watcher. Safe to call after ``disable`` and more than once.

        Raises:
            MonitoringError: If the watcher thread cannot be stopped
        """
        observer = self._observer
        self._observer = None

        with self._lock:
            self._state = SessionState.DISABLED
            self._reload_necessary = True

        if observer is None:
            return

        try:
            observer.stop()
            if observer.is_alive() and threading.current_thread() is not observer:
                observer.join(timeout=self.config.observer_join_timeout_seconds)
            logger.info("Stopped monitoring %s", self._root)
        except Exception as e:
            logger.error("Error stopping file watcher for %s: %s", self._root, e)
            raise MonitoringError(
                "Failed to stop monitoring", path=self._root, operation="dispose", underlying_error=e
            ) from e

    def close(self) -> None:
        """Alias for ``dispose``."""
        self.dispose()

    def __enter__(self) -> "ChangeSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    # --- Watchdog callbacks ---------------------------------------------

    def dispatch(self, event: FileSystemEvent) -> None:
        """Route a watchdog event; a failure while handling it counts as a watcher error."""
        try:
            super().dispatch(event)
        except Exception as e:
            self.on_error(e)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file/directory creation events."""
        self._record_change(ChangeKind.CREATED, event.src_path, event.is_directory)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification events."""
        # Directory mtimes change whenever an entry is added or removed.
        if not event.is_directory:
            self._record_change(ChangeKind.MODIFIED, event.src_path, False)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file/directory deletion events."""
        if self._is_root(event.src_path):
            self.on_error(MonitoringError("Watched directory was deleted", path=self._root, operation="watch"))
            return
        self._record_change(ChangeKind.DELETED, event.src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file/directory rename events."""
        if self._is_root(event.src_path):
            self.on_error(MonitoringError("Watched directory was moved", path=self._root, operation="watch"))
            return
        self._record_rename(event.src_path, event.dest_path, event.is_directory)

    def on_error(self, error: BaseException) -> None:
        """
        Handle a watcher failure.

        The session can no longer trust its view of the file system, so a
        reload becomes necessary and tracking stops.
        """
        with self._lock:
            if self._state is not SessionState.TRACKING:
                return
            logger.error("File system watcher error for %s: %s", self._root, error)
            self._reload_necessary = True
            self._state = SessionState.DISABLED

        observer = self._observer
        if observer is not None:
            observer.stop()

    def _record_change(self, change_kind: ChangeKind, src_path: str | bytes, is_directory: bool) -> None:
        file_path = os.fsdecode(src_path)

        with self._lock:
            if self._state is not SessionState.TRACKING:
                return
            self._change_count += 1

            if self._is_ignored(file_path):
                logger.debug("Ignoring change in %s because it is in an ignored directory", file_path)
                return

            logger.debug("File change event: %s for %s", change_kind.value, file_path)
            self._changed_files.append(FileChangeEvent(change_kind, file_path, is_directory))

    def _record_rename(self, src_path: str | bytes, dest_path: str | bytes, is_directory: bool) -> None:
        old_path = os.fsdecode(src_path)
        new_path = os.fsdecode(dest_path)

        with self._lock:
            if self._state is not SessionState.TRACKING:
                return
            self._change_count += 1
            logger.debug("File rename event: %s to %s", old_path, new_path)

            old_key = self._key(old_path)
            if self._known_file_paths and any(is_nested_under(k, old_key) for k in self._known_file_paths):
                logger.info("Directory with known files renamed from %s. Forcing reload.", old_path)
                self._reload_necessary = True
                return

            for file_path in (old_path, new_path):
                if not self._is_ignored(file_path):
                    self._changed_files.append(FileChangeEvent(ChangeKind.MOVED, file_path, is_directory))

    # --- Helpers ----------------------------------------------------------

    def _key(self, file_path: str) -> str:
        return path_key(file_path, self._case_sensitive)

    def _affects_known_files(self, event: FileChangeEvent, known_file_paths: set[str]) -> bool:
        key = self._key(event.file_path)
        if key in known_file_paths:
            return True
        # Some backends report only the directory when a whole subtree is removed.
        return (
            event.is_directory
            and event.change_kind is ChangeKind.DELETED
            and any(is_nested_under(k, key) for k in known_file_paths)
        )

    def _is_ignored(self, file_path: str) -> bool:
        return is_path_ignored(self._root, file_path, ignored_names=self.config.ignored_directories)

    def _is_root(self, src_path: str | bytes) -> bool:
        return self._key(os.fsdecode(src_path)) == self._key(self._root)

    def _watcher_alive(self) -> bool:
        observer = self._observer
        if observer is None:
            return False
        return observer.is_alive() and all(emitter.is_alive() for emitter in observer.emitters)

    # --- Observability ----------------------------------------------------

    @property
    def root(self) -> str:
        """Watched root directory."""
        return self._root

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def is_tracking(self) -> bool:
        return self.state is SessionState.TRACKING

    @property
    def change_count(self) -> int:
        """Number of change notifications received while tracking, ignored paths included."""
        with self._lock:
            return self._change_count

    def get_status(self) -> dict[str, Any]:
        """
        Get a snapshot of the session bookkeeping.

        Returns:
            Dictionary with session state and counters
        """
        with self._lock:
            return {
                "root": self._root,
                "state": self._state.value,
                "reload_necessary": self._reload_necessary,
                "known_files_set": self._known_file_paths is not None,
                "known_file_count": len(self._known_file_paths or ()),
                "pending_changes": len(self._changed_files),
                "expected_changes": len(self._expected_changes),
                "change_count": self._change_count,
            }
