"""Git utilities for reading the staged change set.

Provides functions to locate the repository root and to list the paths
that differ between the index and the last commit.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class RepositoryNotFoundError(Exception):
    """Raised when the repository root cannot be determined."""

    def __init__(self, start_dir: Path, detail: str = "") -> None:
        self.start_dir = start_dir
        message = f"Not inside a git repository. Searched from: {start_dir}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class GitStatusError(Exception):
    """Raised when the staged change set cannot be read."""


class ChangeKind(Enum):
    """Kind of change recorded in the index, keyed by git's status letter."""

    ADDED = "A"
    COPIED = "C"
    DELETED = "D"
    MODIFIED = "M"
    RENAMED = "R"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"

    @classmethod
    def from_status(cls, status: str) -> ChangeKind:
        """Map a git status field (e.g. "M", "R087") to a ChangeKind."""
        letter = status[:1].upper()
        for kind in cls:
            if kind.value == letter:
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class ChangeRecord:
    """A single staged change.

    Attributes:
        path: Repository-relative path of the change (destination for renames).
        kind: Kind of change.
        source_path: Origin path for renames and copies, None otherwise.
    """

    path: str
    kind: ChangeKind
    source_path: str | None = None

    @property
    def is_deletion(self) -> bool:
        return self.kind is ChangeKind.DELETED


def find_repo_root(start_dir: Path | None = None) -> Path:
    """Find the root of the git work tree containing start_dir.

    Args:
        start_dir: Directory to start from. Defaults to cwd.

    Returns:
        Absolute path of the repository root.

    Raises:
        RepositoryNotFoundError: If git cannot resolve a work tree.
    """
    search_dir = (start_dir or Path.cwd()).resolve()
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=search_dir,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=False,
        )
    except OSError as e:
        raise RepositoryNotFoundError(search_dir, str(e)) from e

    root = result.stdout.strip()
    if result.returncode != 0 or not root:
        raise RepositoryNotFoundError(search_dir, result.stderr.strip())
    return Path(root).resolve()


def parse_name_status(output: str) -> list[ChangeRecord]:
    """Parse NUL-separated `git diff --name-status -z` output.

    Each entry is a status field followed by one path, or two paths for
    renames and copies.

    Args:
        output: Raw command output.

    Returns:
        ChangeRecords in the order git reported them.

    Raises:
        GitStatusError: If the output is truncated.
    """
    fields = output.split("\0")
    if fields and fields[-1] == "":
        fields.pop()

    records: list[ChangeRecord] = []
    index = 0
    while index < len(fields):
        status = fields[index]
        kind = ChangeKind.from_status(status)
        if kind in (ChangeKind.RENAMED, ChangeKind.COPIED):
            if index + 2 >= len(fields):
                raise GitStatusError(f"Truncated status entry: {status!r}")
            records.append(
                ChangeRecord(path=fields[index + 2], kind=kind, source_path=fields[index + 1])
            )
            index += 3
        else:
            if index + 1 >= len(fields):
                raise GitStatusError(f"Truncated status entry: {status!r}")
            records.append(ChangeRecord(path=fields[index + 1], kind=kind))
            index += 2

    return records


def read_staged_changes(repo_root: Path) -> list[ChangeRecord]:
    """Read the changes staged in the index relative to HEAD.

    Args:
        repo_root: Root of the git work tree.

    Returns:
        Ordered list of ChangeRecords.

    Raises:
        GitStatusError: If git is unavailable, the directory is not a
            repository, or there is no commit to compare against.
    """
    try:
        result = subprocess.run(
            ["git", "diff", "--cached", "--name-status", "-z", "-M", "HEAD", "--"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=False,
        )
    except OSError as e:
        raise GitStatusError(f"Unable to run git: {e!s}") from e

    if result.returncode != 0:
        detail = result.stderr.strip() or f"git exited with status {result.returncode}"
        raise GitStatusError(f"Unable to read staged changes: {detail}")

    return parse_name_status(result.stdout)
