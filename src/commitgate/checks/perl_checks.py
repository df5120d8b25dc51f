"""Checks for the Perl group.

Two content scans (debugger breakpoints, the forbidden test helper module)
and two repository helpers (compile check, tidy check) looked up at fixed
candidate locations.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import PurePosixPath

from commitgate.checks.base import CheckContext, CheckId, PatternCheck
from commitgate.checks.tool_checks import ToolCheck
from commitgate.checks.tools import ToolCommand
from commitgate.staging.classifier import FileGroup, StagedFile


class PerlDebuggerCheck(PatternCheck):
    """Fails on `$DB::single = ...` breakpoints left in the code."""

    check_id = CheckId.PERL_DEBUGGER
    label = "Perl debugger statements"
    group = FileGroup.PERL
    pattern = re.compile(r"\$DB::single\s*=")


def module_file_suffix(module: str) -> str:
    """Map a Perl module name to its file path suffix (Foo::Bar -> Foo/Bar.pm)."""
    return "/".join(module.split("::")) + ".pm"


class ForbiddenTestModuleCheck(PatternCheck):
    """Fails on references to the forbidden test helper module.

    The module's own definition file is exempt.
    """

    check_id = CheckId.PERL_TEST_MODULE
    label = "Forbidden test module"
    group = FileGroup.PERL

    def __init__(self, context: CheckContext) -> None:
        super().__init__(context)
        module = context.config.forbidden_test_module
        self.module_pattern = re.compile(rf"(?<![\w:]){re.escape(module)}(?![\w:])")
        self.definition_suffix = module_file_suffix(module)

    def include(self, file: StagedFile) -> bool:
        path = PurePosixPath(file.path)
        suffix = PurePosixPath(self.definition_suffix)
        return path.parts[-len(suffix.parts):] != suffix.parts

    def match_line(self, line: str) -> bool:
        return self.module_pattern.search(line) is not None


class PerlCompileCheck(ToolCheck):
    """Runs the repository's compile-check helper; any output is a failure."""

    check_id = CheckId.PERL_COMPILE
    label = "Perl compile check"
    group = FileGroup.PERL
    failure_signal = "output"

    def locate(self) -> ToolCommand | None:
        return self.context.locator.locate_helper(
            self.context.config.perl_compile_helpers, wrap=True
        )

    def missing_hint(self) -> str | None:
        candidates = " or ".join(self.context.config.perl_compile_helpers)
        return f"No compile-check helper at {candidates}; Perl files were not compiled."


class PerlTidyCheck(ToolCheck):
    """Runs the repository's tidy-check helper; any output is a failure."""

    check_id = CheckId.PERL_TIDY
    label = "Perl formatting"
    group = FileGroup.PERL
    failure_signal = "output"

    def locate(self) -> ToolCommand | None:
        return self.context.locator.locate_helper(self.context.config.perl_tidy_helpers)

    def missing_hint(self) -> str | None:
        candidates = " or ".join(self.context.config.perl_tidy_helpers)
        return f"No tidy-check helper at {candidates}; Perl formatting was not verified."

    def failure_hint(self, command: ToolCommand, paths: Sequence[str]) -> str | None:
        fix = command.render([self.context.config.perl_tidy_fix_flag, *paths])
        return f"Reformat with: {fix}"
