"""File walker for discovering indexable source files."""

import logging
import os
import threading
from collections.abc import Iterator
from pathlib import Path, PurePath

logger = logging.getLogger(__name__)

# Build output, dependency and version-control directories
DEFAULT_IGNORE_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        ".worktrees",
        "dist",
        "build",
        "out",
        ".next",
        "__pycache__",
        "venv",
        ".venv",
        ".codeindex",
    }
)


def is_ignored(relative_path: PurePath, ignore_dirs: frozenset[str]) -> bool:
    """Check whether any directory segment of a relative path is an ignore marker."""
    return any(part in ignore_dirs for part in relative_path.parts[:-1])


def iter_source_files(
    root: Path,
    ignore_dirs: frozenset[str],
    extensions: frozenset[str],
    cancel: threading.Event | None = None,
) -> Iterator[Path]:
    """
    Walk root and yield every file with a recognized extension.

    Entries are visited in name order so scans are reproducible. Ignored
    directories are pruned by exact name and symlinked directories are never
    followed. Unreadable directories are logged and skipped; the walk goes on
    with their siblings. When cancel is set the walk stops at the next
    directory or file boundary.
    """
    if not root.is_dir():
        logger.warning("Index root is not a directory: %s", root)
        return

    yield from _walk(root, ignore_dirs, extensions, cancel)


def _walk(
    directory: Path,
    ignore_dirs: frozenset[str],
    extensions: frozenset[str],
    cancel: threading.Event | None,
) -> Iterator[Path]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        logger.warning("Cannot list directory %s: %s", directory, e)
        return

    for entry in entries:
        if cancel is not None and cancel.is_set():
            return

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file()
        except OSError as e:
            logger.warning("Cannot inspect %s: %s", entry.path, e)
            continue

        if is_dir:
            if entry.name in ignore_dirs:
                continue
            yield from _walk(Path(entry.path), ignore_dirs, extensions, cancel)
        elif is_file and os.path.splitext(entry.name)[1].lower() in extensions:
            yield Path(entry.path)
