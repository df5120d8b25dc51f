"""Check runner for orchestrating all checks.

Runs the registered checks strictly in order against the working set and
collects one CheckResult per check that ran.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from commitgate.checks.base import (
    SKIPPED_BY_REQUEST,
    BaseCheck,
    CheckContext,
    CheckId,
    CheckResult,
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
from commitgate.checks.tool_checks import PythonFormatCheck, ShellLintCheck
from commitgate.checks.tools import ToolLocator
from commitgate.staging.classifier import StagedFile, WorkingSet

if TYPE_CHECKING:
    from commitgate.config import GateConfig

StartCallback = Callable[[BaseCheck], None]
ResultCallback = Callable[[CheckResult], None]


class CheckRunner:
    """Orchestrates running all checks.

    Supports:
    - A fixed run order (global checks first, then per-group checks)
    - Skipping checks by id
    - Progress callbacks for the CLI
    """

    # Registered checks, in run order
    CHECKS: tuple[type[BaseCheck], ...] = (
        UnsavedEditorBufferCheck,
        DeadCodeMarkerCheck,
        ConflictMarkerCheck,
        StopMarkerCheck,
        PerlDebuggerCheck,
        ForbiddenTestModuleCheck,
        PerlCompileCheck,
        PerlTidyCheck,
        ShellLintCheck,
        PythonFormatCheck,
    )

    def __init__(
        self,
        context: CheckContext,
        on_start: StartCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> None:
        """Initialize check runner.

        Args:
            context: Shared run inputs.
            on_start: Called before each check runs.
            on_result: Called with each CheckResult as it is produced.
        """
        self.context = context
        self.on_start = on_start
        self.on_result = on_result

    @classmethod
    def for_repository(
        cls,
        repo_root: Path,
        config: GateConfig,
        on_start: StartCallback | None = None,
        on_result: ResultCallback | None = None,
        locator: ToolLocator | None = None,
    ) -> CheckRunner:
        """Build a runner for the given repository.

        A ToolLocator reading the configured local settings file is created
        unless one is passed in.
        """
        if locator is None:
            locator = ToolLocator(repo_root, config.get_local_settings_path(repo_root))
        context = CheckContext(repo_root=repo_root, config=config, locator=locator)
        return cls(context, on_start=on_start, on_result=on_result)

    @classmethod
    def check_ids(cls) -> list[CheckId]:
        return [check.check_id for check in cls.CHECKS]

    def run(self, working_set: WorkingSet) -> list[CheckResult]:
        """Run every registered check against the working set.

        Group-specific checks with no files in their group do not run and
        produce no result. Skipped checks produce a "skipped" result.

        Args:
            working_set: Filtered, classified staged files.

        Returns:
            Results in run order.
        """
        results: list[CheckResult] = []
        skip_set = self.context.config.skip_set

        for check_class in self.CHECKS:
            check = check_class(self.context)
            files = check.select(working_set.files)

            if check.group is not None and not files:
                continue

            if check.check_id in skip_set:
                result = check.skipped(SKIPPED_BY_REQUEST)
            else:
                if self.on_start is not None:
                    self.on_start(check)
                result = self._run_check(check, files)

            results.append(result)
            if self.on_result is not None:
                self.on_result(result)

        return results

    def _run_check(self, check: BaseCheck, files: list[StagedFile]) -> CheckResult:
        """Run one check, converting unexpected errors into a failure."""
        try:
            return check.run(files)
        except Exception as e:
            return check.failed([f"check crashed: {e!s}"])
