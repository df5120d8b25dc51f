"""Ignore-list handling for staged paths.

The ignore list is a plain text file at the repository root holding one
repository-relative path per line. Matching is exact: no globbing, no
directory prefixes.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

DEFAULT_IGNORE_FILE = ".commitgateignore"


def load_ignore_set(path: Path) -> frozenset[str]:
    """Load the set of ignored paths.

    Args:
        path: Location of the ignore list.

    Returns:
        Paths to exclude. Empty if the file does not exist.

    Raises:
        OSError: If the file exists but cannot be read.
    """
    if not path.is_file():
        return frozenset()

    content = path.read_text(encoding="utf-8")
    return frozenset(line.strip() for line in content.splitlines() if line.strip())


def is_ignored(path: str, ignore_set: frozenset[str]) -> bool:
    """Check whether a repository-relative path is on the ignore list."""
    return path in ignore_set


def filter_ignored(paths: Iterable[str], ignore_set: frozenset[str]) -> list[str]:
    """Remove ignored paths, preserving order.

    Args:
        paths: Repository-relative paths.
        ignore_set: Paths to remove.

    Returns:
        Paths not present in ignore_set.
    """
    return [path for path in paths if not is_ignored(path, ignore_set)]
