"""
Data models for observed file system changes and session state.
"""

from enum import Enum


class ChangeKind(str, Enum):
    """Kind of change reported by the watcher."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


class SessionState(str, Enum):
    """Lifecycle of a change session. Transitions only go forward."""

    TRACKING = "tracking"
    DISABLED = "disabled"


class FileChangeEvent:
    """
    A change the watcher reported for one path.

    The kind and directory flag matter for deletions: a removed directory
    stands for every known file beneath it.
    """

    def __init__(self, change_kind: ChangeKind, file_path: str, is_directory: bool = False):
        self.change_kind = change_kind
        self.file_path = file_path
        self.is_directory = is_directory

    def __str__(self) -> str:
        return f"FileChangeEvent({self.change_kind.value}: {self.file_path})"
