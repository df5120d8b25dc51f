"""CLI utility functions for commitgate.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Hook arguments: Resolving arguments passed through the environment
- Error formatting: Consistent user-friendly error messages with exit codes
"""

from __future__ import annotations

import dataclasses
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import NoReturn

import typer

from commitgate.checks.base import CheckId
from commitgate.config import GateConfig, load_config

# Environment channels read by the hook entry point
SKIP_ENV = "COMMITGATE_SKIP"
ARGS_ENV = "COMMITGATE_ARGS"

HELP_FLAGS = frozenset({"-h", "--help"})

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Commit aborted, or not inside a usable repository
EXIT_CONFIG_ERROR = 2  # Bad option or configuration value


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def report_error(msg: str) -> None:
    """Print an error message to stderr without exiting."""
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    report_error(msg)
    raise typer.Exit(code=exit_code)


def warning(msg: str) -> None:
    """Print a warning message to stderr."""
    styled_prefix = typer.style("Warning:", fg=typer.colors.YELLOW, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)


def info(msg: str) -> None:
    """Print an info message to stdout."""
    typer.echo(msg)


# -----------------------------------------------------------------------------
# Hook Argument Resolution
# -----------------------------------------------------------------------------


@dataclass
class HookArguments:
    """Arguments for one invocation.

    Attributes:
        args: Arguments to hand to the CLI.
        from_env: True when they came from COMMITGATE_ARGS.
        dropped: Help flags removed because the run is not interactive.
    """

    args: list[str]
    from_env: bool = False
    dropped: list[str] = field(default_factory=list)


def resolve_hook_arguments(argv: Sequence[str], environ: Mapping[str, str]) -> HookArguments:
    """Decide which arguments a run uses.

    Git runs the hook without arguments, so COMMITGATE_ARGS supplies them
    when the command line is empty. Help is only honored on an interactive
    command line; help flags inside COMMITGATE_ARGS are dropped.

    Args:
        argv: Command-line arguments (without the program name).
        environ: Process environment.

    Returns:
        The resolved HookArguments.

    Raises:
        ValueError: If COMMITGATE_ARGS cannot be split (unbalanced quotes).
    """
    if argv:
        return HookArguments(args=list(argv))

    raw = environ.get(ARGS_ENV, "")
    if not raw.strip():
        return HookArguments(args=[])

    try:
        tokens = shlex.split(raw)
    except ValueError as e:
        raise ValueError(f"{ARGS_ENV} could not be parsed: {e}") from e

    args = [t for t in tokens if t not in HELP_FLAGS]
    dropped = [t for t in tokens if t in HELP_FLAGS]
    return HookArguments(args=args, from_env=True, dropped=dropped)


# -----------------------------------------------------------------------------
# Config Wiring Helper
# -----------------------------------------------------------------------------


def validate_check_ids(values: Sequence[str]) -> list[str]:
    """Validate --skip values against the registered check ids.

    Raises:
        typer.BadParameter: If a value is not a known check id.
    """
    known = [check.value for check in CheckId]
    unknown = [v for v in values if v not in known]
    if unknown:
        raise typer.BadParameter(
            f"unknown check {', '.join(unknown)} (choose from: {', '.join(known)})",
            param_hint="'--skip'",
        )
    return list(values)


def wire_config(
    skip: Sequence[str] | None = None,
    start_dir: Path | None = None,
) -> GateConfig:
    """Load configuration and add checks skipped on the command line.

    Command-line skips extend the configured ones rather than replacing them.

    Args:
        skip: Check ids passed with --skip.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved GateConfig instance.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    try:
        config = load_config(start_dir=start_dir)
        if skip:
            merged = list(dict.fromkeys([*config.skip, *skip]))
            config = dataclasses.replace(config, skip=merged)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_CONFIG_ERROR)
    return config
