"""Checks that apply to every staged file regardless of group.

- Unsaved editor buffers (Emacs lock symlinks next to the file)
- Dead-code markers left in by authors
- Version-control conflict markers
- Explicit commit-stop markers
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

from commitgate.checks.base import BaseCheck, CheckId, CheckResult, PatternCheck
from commitgate.staging.classifier import StagedFile

DEAD_CODE_PHRASES = (
    "=for later",
    "=for comparison",
    "=for review",
    "restore before commit",
    "remove before commit",
)

STOP_MARKERS = ("gitcommitstop", "git-commit-stop")
STOP_ESCAPE = "<GCSLITERAL>"


def editor_lock_path(location: Path) -> Path:
    """Path of the lock file an editor keeps for a file with unsaved changes."""
    return location.with_name(f".#{location.name}")


class UnsavedEditorBufferCheck(BaseCheck):
    """Fails when an editor still holds unsaved changes for a staged file.

    Emacs marks a modified buffer with a `.#name` symlink beside the file.
    """

    check_id = CheckId.EDITOR_BUFFERS
    label = "Unsaved editor buffers"

    def run(self, files: Sequence[StagedFile]) -> CheckResult:
        diagnostics: list[str] = []

        for file in files:
            lock = editor_lock_path(file.location)
            if lock.is_symlink():
                rel_lock = Path(file.path).with_name(lock.name).as_posix()
                diagnostics.append(f"{file.path}: unsaved changes in an editor (lock file {rel_lock})")

        if diagnostics:
            return self.failed(diagnostics)
        return self.passed()


class DeadCodeMarkerCheck(PatternCheck):
    check_id = CheckId.DEAD_CODE
    label = "Dead-code markers"
    pattern = re.compile("|".join(re.escape(p) for p in DEAD_CODE_PHRASES), re.IGNORECASE)


class ConflictMarkerCheck(PatternCheck):
    check_id = CheckId.CONFLICT_MARKERS
    label = "Merge conflict markers"
    pattern = re.compile(r"^<{7}|>{7}$")


class StopMarkerCheck(PatternCheck):
    """Fails on `<gitcommitstop>` unless the same line carries the escape literal."""

    check_id = CheckId.STOP_MARKER
    label = "Commit stop markers"
    pattern = re.compile("<(?:" + "|".join(re.escape(m) for m in STOP_MARKERS) + ")>", re.IGNORECASE)

    def match_line(self, line: str) -> bool:
        return self.pattern.search(line) is not None and STOP_ESCAPE.lower() not in line.lower()
