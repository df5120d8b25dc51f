"""commitgate CLI - Main entry point and git pre-commit hook."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from commitgate import __version__
from commitgate.checks.aggregator import RunOutcome, exit_code, summary_line
from commitgate.checks.base import BaseCheck, CheckResult
from commitgate.checks.runner import CheckRunner
from commitgate.checks.tools import is_truthy
from commitgate.cli_utils import (
    ARGS_ENV,
    EXIT_CONFIG_ERROR,
    EXIT_SUCCESS,
    EXIT_USER_ERROR,
    SKIP_ENV,
    info,
    report_error,
    resolve_hook_arguments,
    validate_check_ids,
    warning,
    wire_config,
)
from commitgate.config import GateConfig
from commitgate.pipeline import run_gate
from commitgate.staging.classifier import WorkingSet
from commitgate.staging.git_helper import (
    GitStatusError,
    RepositoryNotFoundError,
    find_repo_root,
)

app = typer.Typer(
    name="commitgate",
    help="commitgate - Pre-commit validation gate for staged files.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Rich consoles for output
console = Console()
err_console = Console(stderr=True)


# -----------------------------------------------------------------------------
# Output Helpers
# -----------------------------------------------------------------------------


def _output_success(message: str, quiet: bool = False) -> None:
    """Print a success message."""
    if not quiet:
        console.print(f"[green]Success:[/green] {message}")


def _output_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]Error:[/red] {message}")


def _output_warning(message: str, quiet: bool = False) -> None:
    """Print a warning message."""
    if not quiet:
        err_console.print(f"[yellow]Warning:[/yellow] {message}")


def _output_info(message: str, quiet: bool = False) -> None:
    """Print an info message."""
    if not quiet:
        console.print(message)


def _printable(text: str) -> str:
    """Make undecodable path bytes (lone surrogates) safe to print."""
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def _output_raw(line: str, err: bool = False) -> None:
    """Print text exactly as given: no markup, no highlighting."""
    (err_console if err else console).out(_printable(line), highlight=False)


def _exit_error(message: str, exit_code: int = EXIT_USER_ERROR) -> None:
    """Print error and exit; the message is shown literally."""
    _output_error(escape(_printable(message)))
    raise typer.Exit(code=exit_code)


def _report_outcome(outcome: RunOutcome, quiet: bool) -> None:
    """Print the verdict and exit with its status."""
    if outcome.overall == "proceed":
        _output_success(summary_line(outcome), quiet)
    else:
        _output_error(summary_line(outcome))
    raise typer.Exit(code=exit_code(outcome))


# -----------------------------------------------------------------------------
# Progress Reporting
# -----------------------------------------------------------------------------


class _Reporter:
    """Narrates a run. Failures are always shown; everything else only when verbose."""

    def __init__(self, verbose: bool) -> None:
        self.verbose = verbose

    def collected(self, working_set: WorkingSet) -> None:
        quiet = not self.verbose
        _output_info(f"Checking {len(working_set.files)} staged file(s).", quiet)
        if working_set.deleted_count:
            _output_info(f"Ignoring {working_set.deleted_count} deleted file(s).", quiet)
        if not self.verbose:
            return
        for path in working_set.ignored:
            _output_raw(f"  excluded by ignore list: {path}")
        for path in working_set.non_regular:
            _output_raw(f"  not a regular file, not checked: {path}")

    def start(self, check: BaseCheck) -> None:
        _output_info(f"[dim]Running {check.label}...[/dim]", not self.verbose)

    def result(self, result: CheckResult) -> None:
        if result.status == "fail":
            _output_error(f"{result.label} failed")
            for line in result.diagnostics:
                _output_raw(line, err=True)
            if result.hint:
                _output_raw(result.hint, err=True)
        elif result.status == "skipped":
            _output_warning(f"{result.label} skipped: {result.reason}", not self.verbose)
            if result.hint and self.verbose:
                _output_raw(f"  {result.hint}", err=True)
        else:
            _output_info(f"  [green]PASS[/green] {result.label}", not self.verbose)


# -----------------------------------------------------------------------------
# Eager Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"commitgate version {__version__}")
        raise typer.Exit()


def list_checks_callback(value: bool) -> None:
    """Print the registered checks in run order and exit."""
    if not value:
        return

    table = Table(title="Registered checks")
    table.add_column("ID", style="cyan")
    table.add_column("Check")
    table.add_column("Files")
    table.add_column("Fails on")

    for check in CheckRunner.CHECKS:
        group = check.group.value if check.group is not None else "all"
        signal = getattr(check, "failure_signal", "match")
        fails_on = {"output": "tool output", "exit-status": "tool exit status"}.get(signal, "content match")
        table.add_row(check.check_id.value, check.label, group, fails_on)

    console.print(table)
    raise typer.Exit()


def skip_callback(value: list[str] | None) -> list[str]:
    """Validate --skip values."""
    return validate_check_ids(value or [])


# -----------------------------------------------------------------------------
# Run Command
# -----------------------------------------------------------------------------


@app.command()
def run(
    skip: list[str] | None = typer.Option(
        None,
        "--skip",
        "-s",
        help="Skip one check by id (repeatable). See --list-checks.",
        metavar="CHECK",
        callback=skip_callback,
    ),
    skip_all: bool = typer.Option(
        False,
        "--skip-all",
        help="Skip every check and let the commit proceed.",
    ),
    verbose: bool = typer.Option(
        True,
        "--verbose/--quiet",
        "-v/-q",
        help="Narrate progress (default) or only report failures.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--no-commit",
        help="Run every check, then abort the commit regardless of the result.",
    ),
    list_checks: bool | None = typer.Option(
        None,
        "--list-checks",
        help="List the registered checks and exit.",
        callback=list_checks_callback,
        is_eager=True,
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Validate the files staged for commit.

    Runs content checks (editor lock files, dead-code markers, conflict
    markers, commit-stop markers) on every staged file, then the
    group-specific checks for Perl, shell and Python files. External tools
    that are not installed are skipped, not failed.

    Exits 0 when the commit may proceed and 1 when it must abort.
    Arguments can also be supplied through COMMITGATE_ARGS, and setting
    COMMITGATE_SKIP skips the whole run.
    """
    quiet = not verbose

    if skip_all:
        _output_info("Skipping all commit checks.", quiet)
        _report_outcome(run_gate(Path.cwd(), GateConfig(), skip_all=True).outcome, quiet)

    try:
        repo_root = find_repo_root()
    except RepositoryNotFoundError as e:
        _exit_error(str(e))

    config = wire_config(skip=skip, start_dir=repo_root)
    reporter = _Reporter(verbose)

    try:
        gate = run_gate(
            repo_root,
            config,
            dry_run=dry_run,
            on_collected=reporter.collected,
            on_start=reporter.start,
            on_result=reporter.result,
        )
    except GitStatusError as e:
        _exit_error(str(e))
    except OSError as e:
        _exit_error(f"Unable to read {config.ignore_file}: {e}")

    _report_outcome(gate.outcome, quiet)


# -----------------------------------------------------------------------------
# Hook Entry Point
# -----------------------------------------------------------------------------


def main() -> None:
    """Console-script and git hook entry point.

    COMMITGATE_SKIP short-circuits before anything else. When git runs the
    hook without arguments, COMMITGATE_ARGS supplies them.
    """
    if is_truthy(os.environ.get(SKIP_ENV)):
        info(f"commitgate: {SKIP_ENV} is set, skipping all commit checks.")
        sys.exit(EXIT_SUCCESS)

    try:
        hook_args = resolve_hook_arguments(sys.argv[1:], os.environ)
    except ValueError as e:
        report_error(str(e))
        sys.exit(EXIT_CONFIG_ERROR)

    if hook_args.dropped:
        warning(f"Ignoring {' '.join(hook_args.dropped)} from {ARGS_ENV}; help is only shown interactively.")

    app(args=hook_args.args, prog_name="commitgate")


if __name__ == "__main__":
    main()
