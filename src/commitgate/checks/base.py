"""Base check classes and result models for commitgate.

Provides the core abstractions for implementing checks that run against
the staged file set: the CheckId registry keys, the CheckResult record and
the BaseCheck / PatternCheck classes.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Literal

from commitgate.staging.classifier import FileGroup, StagedFile

if TYPE_CHECKING:
    from commitgate.checks.tools import ToolLocator
    from commitgate.config import GateConfig

CheckStatus = Literal["pass", "fail", "skipped"]

SKIPPED_BY_REQUEST = "skipped by request"
TOOL_NOT_FOUND = "tool not found"


class CheckId(Enum):
    """Identifier of each registered check, as accepted by --skip."""

    EDITOR_BUFFERS = "editor-buffers"
    DEAD_CODE = "dead-code"
    CONFLICT_MARKERS = "conflict-markers"
    STOP_MARKER = "stop-marker"
    PERL_DEBUGGER = "perl-debugger"
    PERL_TEST_MODULE = "perl-test-module"
    PERL_COMPILE = "perl-compile"
    PERL_TIDY = "perl-tidy"
    SHELL_LINT = "shell-lint"
    PYTHON_FORMAT = "python-format"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single check.

    Attributes:
        check_id: Which check produced the result.
        label: Human-readable check name, used as the error header.
        status: "pass", "fail" or "skipped".
        reason: Why the check was skipped; None unless status is "skipped".
        diagnostics: Lines to show the operator verbatim (file:line: text,
            or raw tool output).
        hint: Remediation or advisory text, kept apart from diagnostics.
    """

    check_id: CheckId
    label: str
    status: CheckStatus
    reason: str | None = None
    diagnostics: tuple[str, ...] = ()
    hint: str | None = None


@dataclass(frozen=True)
class CheckContext:
    """Read-only inputs shared by every check in a run.

    Attributes:
        repo_root: Root of the git work tree.
        config: Resolved configuration.
        locator: Finds external tools for tool-based checks.
    """

    repo_root: Path
    config: GateConfig
    locator: ToolLocator


class BaseCheck(ABC):
    """Abstract base class for all checks.

    Subclasses declare their id, label and (for group-specific checks) the
    FileGroup they apply to, and implement run().

    Attributes:
        context: Shared run inputs.
    """

    check_id: ClassVar[CheckId]
    label: ClassVar[str]
    # None means the check applies to every staged file
    group: ClassVar[FileGroup | None] = None

    def __init__(self, context: CheckContext) -> None:
        self.context = context

    def select(self, files: Sequence[StagedFile]) -> list[StagedFile]:
        """Return the files this check applies to."""
        if self.group is None:
            return list(files)
        return [f for f in files if f.group is self.group]

    @abstractmethod
    def run(self, files: Sequence[StagedFile]) -> CheckResult:
        """Run the check against the files it applies to.

        Args:
            files: Files already narrowed by select().

        Returns:
            CheckResult for this check.
        """

    def passed(self) -> CheckResult:
        return CheckResult(check_id=self.check_id, label=self.label, status="pass")

    def failed(self, diagnostics: Sequence[str], hint: str | None = None) -> CheckResult:
        return CheckResult(
            check_id=self.check_id,
            label=self.label,
            status="fail",
            diagnostics=tuple(diagnostics),
            hint=hint,
        )

    def skipped(self, reason: str, hint: str | None = None) -> CheckResult:
        return CheckResult(
            check_id=self.check_id,
            label=self.label,
            status="skipped",
            reason=reason,
            hint=hint,
        )


def read_lines(path: Path) -> list[str]:
    """Read a file as text lines, replacing undecodable bytes.

    Raises:
        OSError: If the file cannot be read.
    """
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


class PatternCheck(BaseCheck):
    """A check that scans file contents line by line for a pattern.

    Every matching line is reported as "path:line: text". Subclasses set
    `pattern` or override match_line(); include() narrows the files scanned.
    """

    pattern: ClassVar[re.Pattern[str]]

    def include(self, file: StagedFile) -> bool:
        return True

    def match_line(self, line: str) -> bool:
        return self.pattern.search(line) is not None

    def run(self, files: Sequence[StagedFile]) -> CheckResult:
        diagnostics: list[str] = []

        for file in files:
            if not self.include(file):
                continue
            try:
                lines = read_lines(file.location)
            except OSError as e:
                diagnostics.append(f"{file.path}: unable to read file: {e.strerror or e}")
                continue

            for lineno, line in enumerate(lines, start=1):
                if self.match_line(line):
                    diagnostics.append(f"{file.path}:{lineno}: {line}")

        if diagnostics:
            return self.failed(diagnostics)
        return self.passed()
