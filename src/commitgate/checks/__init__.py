"""Check framework for commitgate.

Provides the checks run against staged files, the runner that orchestrates
them and the aggregation of their results into a commit decision.
"""

from __future__ import annotations

from commitgate.checks.aggregator import RunOutcome, decide, exit_code, skipped_run, summary_line
from commitgate.checks.base import (
    BaseCheck,
    CheckContext,
    CheckId,
    CheckResult,
    CheckStatus,
    PatternCheck,
)
from commitgate.checks.global_checks import (
    ConflictMarkerCheck,
    DeadCodeMarkerCheck,
    StopMarkerCheck,
    UnsavedEditorBufferCheck,
)
from commitgate.checks.perl_checks import (
    ForbiddenTestModuleCheck,
    PerlCompileCheck,
    PerlDebuggerCheck,
    PerlTidyCheck,
)
from commitgate.checks.runner import CheckRunner
from commitgate.checks.tool_checks import PythonFormatCheck, ShellLintCheck, ToolCheck
from commitgate.checks.tools import ToolCommand, ToolLocator, ToolOutput, run_tool

__all__ = [
    # Base types
    "BaseCheck",
    "CheckContext",
    "CheckId",
    "CheckResult",
    "CheckStatus",
    "PatternCheck",
    "ToolCheck",
    # Global checks
    "ConflictMarkerCheck",
    "DeadCodeMarkerCheck",
    "StopMarkerCheck",
    "UnsavedEditorBufferCheck",
    # Group checks
    "ForbiddenTestModuleCheck",
    "PerlCompileCheck",
    "PerlDebuggerCheck",
    "PerlTidyCheck",
    "PythonFormatCheck",
    "ShellLintCheck",
    # Tools
    "ToolCommand",
    "ToolLocator",
    "ToolOutput",
    "run_tool",
    # Runner and aggregation
    "CheckRunner",
    "RunOutcome",
    "decide",
    "exit_code",
    "skipped_run",
    "summary_line",
]
