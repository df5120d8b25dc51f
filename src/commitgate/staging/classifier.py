"""File classification for staged files.

Decides whether a staged path is a regular file and which checker group it
belongs to. Scripts without extensions are common, so the first line is
sniffed before falling back to the filename.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from commitgate.staging.git_helper import ChangeRecord
from commitgate.staging.path_filter import filter_ignored

# Bytes read when sniffing the first line
FIRST_LINE_LIMIT = 1024

PERL_SHEBANG = re.compile(r"^\s*#!.*\bperl[0-9.]*\b")
PYTHON_SHEBANG = re.compile(r"^\s*#!.*\bpython[0-9.]*\b")

PERL_EXTENSIONS = frozenset({".pl", ".pm", ".t", ".sgi"})
PYTHON_EXTENSIONS = frozenset({".py"})

SHELL_MODE_MARKERS = (
    # Emacs: -*- sh -*-, -*- mode: shell-script -*-
    re.compile(r"-\*-\s*(?:mode:\s*)?(?:sh|bash|shell-script)\s*(?:;.*)?-\*-", re.IGNORECASE),
    # vim: ft=sh, vim: set filetype=bash:
    re.compile(r"\bvim?:\s*(?:set\s+)?(?:ft|filetype)=(?:sh|bash)\b", re.IGNORECASE),
)


class FileGroup(Enum):
    """Checker group a staged file is routed to."""

    PERL = "perl"
    SHELL = "shell"
    PYTHON = "python"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class StagedFile:
    """A staged file eligible for checking.

    Attributes:
        path: Repository-relative path as reported by git.
        location: Absolute path on disk.
        exists_on_disk: Whether the path is currently a regular file.
        group: Checker group assigned by classification.
    """

    path: str
    location: Path
    exists_on_disk: bool
    group: FileGroup = FileGroup.UNCLASSIFIED


@dataclass
class WorkingSet:
    """The filtered, classified file set handed to the check runner.

    Attributes:
        files: Regular, non-ignored staged files in git order.
        deleted_count: Number of staged deletions (never checked).
        non_regular: Paths skipped because they are not regular files.
        ignored: Paths removed by the ignore list.
    """

    files: list[StagedFile] = field(default_factory=list)
    deleted_count: int = 0
    non_regular: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)

    def for_group(self, group: FileGroup) -> list[StagedFile]:
        """Return the files belonging to one group."""
        return [f for f in self.files if f.group is group]


def is_regular_file(path: Path) -> bool:
    """Check that a path is a regular file and not a symlink."""
    return not path.is_symlink() and path.is_file()


def read_first_line(path: Path) -> str:
    """Read the first line of a file, decoding leniently.

    Returns an empty string when the file cannot be read.
    """
    try:
        with open(path, "rb") as f:
            head = f.read(FIRST_LINE_LIMIT)
    except OSError:
        return ""
    return head.split(b"\n", 1)[0].decode("utf-8", errors="replace")


def _has_extension(name: str, extensions: frozenset[str]) -> bool:
    return Path(name).suffix.lower() in extensions


def classify(path: str, first_line: str) -> FileGroup:
    """Assign a FileGroup; the first matching rule wins.

    1. Perl shebang or Perl extension
    2. Shell editor mode marker
    3. Python shebang or .py extension
    4. Unclassified

    Args:
        path: File name or path; only the suffix is inspected.
        first_line: First line of the file content.

    Returns:
        The matching FileGroup.
    """
    if PERL_SHEBANG.match(first_line) or _has_extension(path, PERL_EXTENSIONS):
        return FileGroup.PERL

    if any(marker.search(first_line) for marker in SHELL_MODE_MARKERS):
        return FileGroup.SHELL

    if PYTHON_SHEBANG.match(first_line) or _has_extension(path, PYTHON_EXTENSIONS):
        return FileGroup.PYTHON

    return FileGroup.UNCLASSIFIED


def stage_file(repo_root: Path, path: str) -> StagedFile:
    """Build a StagedFile for a repository-relative path."""
    location = repo_root / path
    if not is_regular_file(location):
        return StagedFile(path=path, location=location, exists_on_disk=False)
    group = classify(path, read_first_line(location))
    return StagedFile(path=path, location=location, exists_on_disk=True, group=group)


def classify_changes(
    records: Iterable[ChangeRecord],
    repo_root: Path,
    ignore_set: frozenset[str] = frozenset(),
) -> WorkingSet:
    """Turn staged change records into a WorkingSet.

    Deletions are only counted. Ignored paths are set aside before any
    file access. Non-regular files (symlinks, submodules, vanished paths)
    are recorded but never checked.

    Args:
        records: Staged changes in git order.
        repo_root: Root of the git work tree.
        ignore_set: Exact paths to exclude.

    Returns:
        The WorkingSet for this run.
    """
    working_set = WorkingSet()

    records = list(records)
    live = [record for record in records if not record.is_deletion]
    working_set.deleted_count = len(records) - len(live)
    kept = set(filter_ignored([record.path for record in live], ignore_set))

    for record in live:
        if record.path not in kept:
            working_set.ignored.append(record.path)
            continue

        staged = stage_file(repo_root, record.path)
        if staged.exists_on_disk:
            working_set.files.append(staged)
        else:
            working_set.non_regular.append(record.path)

    return working_set
