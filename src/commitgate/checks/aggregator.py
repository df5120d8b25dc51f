"""Result aggregation for a commitgate run.

Turns the ordered CheckResults into the final proceed/abort decision, the
process exit status and the summary line shown to the operator.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from commitgate.checks.base import CheckResult

Overall = Literal["proceed", "abort"]

EXIT_PROCEED = 0
EXIT_ABORT = 1


@dataclass(frozen=True)
class RunOutcome:
    """Terminal artifact of a run.

    Attributes:
        overall: "proceed" if the commit may continue, "abort" otherwise.
        results: CheckResults in run order.
        dry_run: Whether the run was a dry run (always aborts).
    """

    overall: Overall
    results: tuple[CheckResult, ...] = ()
    dry_run: bool = False

    @property
    def failures(self) -> list[CheckResult]:
        return [r for r in self.results if r.status == "fail"]

    @property
    def skipped(self) -> list[CheckResult]:
        return [r for r in self.results if r.status == "skipped"]

    @property
    def passed(self) -> list[CheckResult]:
        return [r for r in self.results if r.status == "pass"]


def decide(results: Sequence[CheckResult], dry_run: bool = False) -> RunOutcome:
    """Aggregate results into a RunOutcome.

    Any failure aborts. A dry run aborts even when everything passed.

    Args:
        results: CheckResults in run order.
        dry_run: Force an abort decision.

    Returns:
        The RunOutcome for the run.
    """
    has_failures = any(result.status == "fail" for result in results)
    overall: Overall = "abort" if has_failures or dry_run else "proceed"
    return RunOutcome(overall=overall, results=tuple(results), dry_run=dry_run)


def skipped_run() -> RunOutcome:
    """Outcome of a run skipped entirely: proceed without any results."""
    return RunOutcome(overall="proceed")


def exit_code(outcome: RunOutcome) -> int:
    """Process exit status for an outcome."""
    return EXIT_PROCEED if outcome.overall == "proceed" else EXIT_ABORT


def summary_line(outcome: RunOutcome) -> str:
    """Render the final verdict as one line of plain text."""
    failed = len(outcome.failures)
    counts = (
        f"{len(outcome.passed)} passed, {failed} failed, {len(outcome.skipped)} skipped"
    )

    if failed:
        return f"Commit aborted: {failed} check(s) failed ({counts})."
    if outcome.dry_run:
        return f"Dry run: commit aborted, no checks failed ({counts})."
    if not outcome.results:
        return "Commit may proceed: no checks ran."
    return f"Commit may proceed ({counts})."
