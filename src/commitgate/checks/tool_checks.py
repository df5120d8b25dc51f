"""Checks that delegate to external linters and formatters.

Each tool check locates its tool through the ToolLocator, runs it once with
the group's file paths, and interprets the result according to its
`failure_signal`:

- "output": any output at all is a failure (the tool prints only problems)
- "exit-status": a non-zero exit status is a failure (output is informational)

A tool that cannot be located skips the check instead of failing it.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from typing import ClassVar, Literal

from commitgate.checks.base import TOOL_NOT_FOUND, BaseCheck, CheckId, CheckResult
from commitgate.checks.tools import ToolCommand, ToolOutput, run_tool, tool_argument
from commitgate.staging.classifier import FileGroup, StagedFile

FailureSignal = Literal["output", "exit-status"]


class ToolCheck(BaseCheck):
    """Base class for checks backed by an external tool."""

    failure_signal: ClassVar[FailureSignal] = "output"

    @abstractmethod
    def locate(self) -> ToolCommand | None:
        """Resolve the tool command, or None when it is unavailable."""

    def missing_hint(self) -> str | None:
        """Advisory shown when the tool is not found."""
        return None

    def failure_hint(self, command: ToolCommand, paths: Sequence[str]) -> str | None:
        """Remediation shown when the tool reports a problem."""
        return None

    def is_failure(self, output: ToolOutput) -> bool:
        if self.failure_signal == "exit-status":
            return output.returncode != 0
        return bool(output.output.strip())

    def run(self, files: Sequence[StagedFile]) -> CheckResult:
        command = self.locate()
        if command is None:
            return self.skipped(TOOL_NOT_FOUND, hint=self.missing_hint())

        paths = [tool_argument(f.path) for f in files]
        output = run_tool(
            command,
            paths,
            cwd=self.context.repo_root,
            timeout=self.context.config.tool_timeout,
        )

        if output.error is not None:
            return self.failed([*output.lines, output.error])

        if self.is_failure(output):
            return self.failed(output.lines, hint=self.failure_hint(command, paths))
        return self.passed()


class ShellLintCheck(ToolCheck):
    check_id = CheckId.SHELL_LINT
    label = "Shell lint"
    group = FileGroup.SHELL
    failure_signal = "output"

    def locate(self) -> ToolCommand | None:
        return self.context.locator.locate_command(self.context.config.shell_lint_command)

    def missing_hint(self) -> str | None:
        return f"Install {self.context.config.shell_lint_command[0]} to lint shell scripts."


class PythonFormatCheck(ToolCheck):
    """Runs the formatter in check-only mode; its exit status is authoritative."""

    check_id = CheckId.PYTHON_FORMAT
    label = "Python formatting"
    group = FileGroup.PYTHON
    failure_signal = "exit-status"

    def locate(self) -> ToolCommand | None:
        return self.context.locator.locate_command(self.context.config.python_format_command)

    def missing_hint(self) -> str | None:
        return f"Install {self.context.config.python_format_command[0]} to check Python formatting."
