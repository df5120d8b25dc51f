"""End-to-end gate pipeline.

StatusReader -> IgnoreFilter / FileClassifier -> CheckRunner -> aggregation.
Each stage only reads what the previous one produced.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from commitgate.checks.aggregator import RunOutcome, decide, skipped_run
from commitgate.checks.runner import CheckRunner, ResultCallback, StartCallback
from commitgate.checks.tools import ToolLocator
from commitgate.config import GateConfig
from commitgate.staging.classifier import WorkingSet, classify_changes
from commitgate.staging.git_helper import ChangeRecord, read_staged_changes
from commitgate.staging.path_filter import load_ignore_set

CollectedCallback = Callable[[WorkingSet], None]


@dataclass(frozen=True)
class GateRun:
    """A finished run: the working set that was checked and the outcome.

    working_set is None when the run was skipped before reading git.
    """

    working_set: WorkingSet | None
    outcome: RunOutcome


def collect_working_set(
    repo_root: Path,
    config: GateConfig,
    changes: Sequence[ChangeRecord] | None = None,
) -> WorkingSet:
    """Read staged changes and turn them into a WorkingSet.

    Args:
        repo_root: Root of the git work tree.
        config: Resolved configuration (ignore list location).
        changes: Pre-read change records; read from git when None.

    Raises:
        GitStatusError: If the staged changes cannot be read.
        OSError: If the ignore list exists but cannot be read.
    """
    records = read_staged_changes(repo_root) if changes is None else changes
    ignore_set = load_ignore_set(config.get_ignore_path(repo_root))
    return classify_changes(records, repo_root, ignore_set)


def run_gate(
    repo_root: Path,
    config: GateConfig,
    *,
    skip_all: bool = False,
    dry_run: bool = False,
    changes: Sequence[ChangeRecord] | None = None,
    on_collected: CollectedCallback | None = None,
    on_start: StartCallback | None = None,
    on_result: ResultCallback | None = None,
    locator: ToolLocator | None = None,
) -> GateRun:
    """Run the whole gate once.

    Args:
        repo_root: Root of the git work tree.
        config: Resolved configuration.
        skip_all: Proceed immediately without running anything.
        dry_run: Run every check but always abort.
        changes: Pre-read change records; read from git when None.
        on_collected: Called with the working set before any check runs.
        on_start: Progress callback, see CheckRunner.
        on_result: Result callback, see CheckRunner.
        locator: Tool lookup override; built from config when None.

    Returns:
        GateRun with the working set and the RunOutcome.
    """
    if skip_all:
        return GateRun(working_set=None, outcome=skipped_run())

    working_set = collect_working_set(repo_root, config, changes)
    if on_collected is not None:
        on_collected(working_set)

    runner = CheckRunner.for_repository(
        repo_root, config, on_start=on_start, on_result=on_result, locator=locator
    )
    results = runner.run(working_set)
    return GateRun(working_set=working_set, outcome=decide(results, dry_run=dry_run))
