"""
Path helpers shared by the change session.

Everything here is pure: no file system access, no state. That keeps the
ignore rules and the path-equality policy testable with foreign separators.
"""

import os
from collections.abc import Iterable, Sequence

from workspace_monitor.config.settings import DEFAULT_IGNORED_DIRECTORIES

PATH_SEPARATORS: tuple[str, ...] = tuple(sep for sep in (os.sep, os.altsep) if sep)


def split_path(path: str, separators: Sequence[str] = PATH_SEPARATORS) -> list[str]:
    """Split a path on any of the given separators, dropping empty segments."""
    primary = separators[0]
    for sep in separators[1:]:
        path = path.replace(sep, primary)
    return [part for part in path.split(primary) if part]


def relative_parts(base_path: str, path: str, separators: Sequence[str] = PATH_SEPARATORS) -> list[str]:
    """
    Get the segments of ``path`` relative to ``base_path``.

    Args:
        base_path: Root the path is expected to live under
        path: Candidate path
        separators: Characters treated as directory separators

    Returns:
        Path segments below the root; the full segment list if the path
        does not live under the root
    """
    base_parts = split_path(base_path, separators)
    parts = split_path(path, separators)

    prefix = parts[: len(base_parts)]
    if len(prefix) == len(base_parts) and all(a.casefold() == b.casefold() for a, b in zip(prefix, base_parts)):
        return parts[len(base_parts) :]

    try:
        return split_path(os.path.relpath(path, base_path), separators)
    except ValueError:
        # Different drives on Windows
        return parts


def is_path_ignored(
    base_path: str,
    path: str,
    separators: Sequence[str] = PATH_SEPARATORS,
    ignored_names: Iterable[str] = DEFAULT_IGNORED_DIRECTORIES,
) -> bool:
    """
    Check if a path falls inside an ignored directory.

    A path is ignored when any segment of it, relative to ``base_path``,
    case-insensitively equals one of ``ignored_names``.

    Args:
        base_path: Watched root directory
        path: Path reported by the watcher
        separators: Characters treated as directory separators
        ignored_names: Directory names to ignore at any depth

    Returns:
        True if the path must not be tracked
    """
    ignored = {name.casefold() for name in ignored_names}
    return any(part.casefold() in ignored for part in relative_parts(base_path, path, separators))


def path_key(path: str | os.PathLike, case_sensitive: bool) -> str:
    """Normalize a path into the key used for known-file and expected-change lookups."""
    key = os.path.abspath(os.fsdecode(path))
    return key if case_sensitive else key.casefold()


def is_nested_under(candidate_key: str, directory_key: str) -> bool:
    """Check if a path key lies strictly below a directory key."""
    return any(candidate_key.startswith(directory_key.rstrip(sep) + sep) for sep in PATH_SEPARATORS)
