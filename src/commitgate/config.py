"""Configuration management for commitgate.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .commitgaterc > pyproject.toml > defaults
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from commitgate.checks.base import CheckId
from commitgate.staging.path_filter import DEFAULT_IGNORE_FILE

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

RC_FILE_NAME = ".commitgaterc"


@dataclass
class GateConfig:
    """Configuration for a commitgate run.

    Attributes:
        skip: Check ids that never run (see CheckId for valid values).
        ignore_file: Repository-relative path of the ignore list.
        local_settings_file: Repository-relative path of the local settings
            file consulted for the dependency-execution wrapper.
        tool_timeout: Seconds an external tool may run before it is killed.
        forbidden_test_module: Perl module that must not be referenced from
            committed code.
        perl_compile_helpers: Candidate locations of the compile-check helper.
        perl_tidy_helpers: Candidate locations of the tidy-check helper.
        perl_tidy_fix_flag: Flag that makes the tidy helper rewrite files.
        shell_lint_command: Shell linter command line (files are appended).
        python_format_command: Python formatter check-mode command line.
    """

    skip: list[str] = field(default_factory=list)
    ignore_file: str = DEFAULT_IGNORE_FILE
    local_settings_file: str = ".commitgate.local"
    tool_timeout: float = 300.0
    forbidden_test_module: str = "Test::Only"
    perl_compile_helpers: list[str] = field(
        default_factory=lambda: ["bin/perl-compile-check", "tools/perl-compile-check"]
    )
    perl_tidy_helpers: list[str] = field(
        default_factory=lambda: ["bin/perl-tidy-check", "tools/perl-tidy-check"]
    )
    perl_tidy_fix_flag: str = "--fix"
    shell_lint_command: list[str] = field(default_factory=lambda: ["shellcheck"])
    python_format_command: list[str] = field(default_factory=lambda: ["black", "--check"])

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if not isinstance(self.skip, list) or not all(isinstance(s, str) for s in self.skip):
            raise ValueError("skip must be a list of check ids")
        known = {check.value for check in CheckId}
        unknown = sorted(set(self.skip) - known)
        if unknown:
            raise ValueError(f"unknown check id(s) in skip: {', '.join(unknown)}")

        for name in ("ignore_file", "local_settings_file", "forbidden_test_module", "perl_tidy_fix_flag"):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ValueError(f"{name} must be a non-empty string")

        if isinstance(self.tool_timeout, bool) or not isinstance(self.tool_timeout, (int, float)):
            raise ValueError("tool_timeout must be a number")
        if self.tool_timeout <= 0:
            raise ValueError("tool_timeout must be positive")

        for name in (
            "perl_compile_helpers",
            "perl_tidy_helpers",
            "shell_lint_command",
            "python_format_command",
        ):
            value = getattr(self, name)
            if (
                not isinstance(value, list)
                or not value
                or not all(isinstance(v, str) and v for v in value)
            ):
                raise ValueError(f"{name} must be a non-empty list of strings")

    @property
    def skip_set(self) -> frozenset[CheckId]:
        """Skipped checks as CheckId members."""
        return frozenset(CheckId(s) for s in self.skip)

    def get_ignore_path(self, repo_root: Path) -> Path:
        """Get the full path to the ignore list."""
        return repo_root / self.ignore_file

    def get_local_settings_path(self, repo_root: Path) -> Path:
        """Get the full path to the local settings file."""
        return repo_root / self.local_settings_file


def _get_config_field_names() -> set[str]:
    """Get the set of valid configuration field names.

    Returns:
        Set of field names from GateConfig.
    """
    return {f.name for f in fields(GateConfig)}


def find_config_file(filename: str = RC_FILE_NAME, start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        config_path = current / filename
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            return None
        current = parent


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _load_from_rc(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from the .commitgaterc file.

    Returns:
        Configuration from .commitgaterc, or empty dict if not found.
    """
    config_path = find_config_file(RC_FILE_NAME, start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
        valid_fields = _get_config_field_names()
        return {k: v for k, v in data.items() if k in valid_fields}
    except (tomllib.TOMLDecodeError, OSError):
        return {}


def _load_from_pyproject(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from pyproject.toml [tool.commitgate] section.

    Returns:
        Configuration from pyproject.toml, or empty dict if not found.
    """
    config_path = find_config_file("pyproject.toml", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
        section = data.get("tool", {}).get("commitgate", {})
        valid_fields = _get_config_field_names()
        return {k: v for k, v in section.items() if k in valid_fields}
    except (tomllib.TOMLDecodeError, OSError):
        return {}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Supported: COMMITGATE_IGNORE_FILE, COMMITGATE_LOCAL_SETTINGS_FILE,
    COMMITGATE_TOOL_TIMEOUT and COMMITGATE_SKIP_CHECKS (comma separated).

    Raises:
        ValueError: If COMMITGATE_TOOL_TIMEOUT is not a number.
    """
    result: dict[str, Any] = {}

    for env_var, config_key in (
        ("COMMITGATE_IGNORE_FILE", "ignore_file"),
        ("COMMITGATE_LOCAL_SETTINGS_FILE", "local_settings_file"),
    ):
        value = os.environ.get(env_var)
        if value is not None:
            result[config_key] = value

    timeout = os.environ.get("COMMITGATE_TOOL_TIMEOUT")
    if timeout is not None:
        try:
            result["tool_timeout"] = float(timeout)
        except ValueError:
            raise ValueError(f"COMMITGATE_TOOL_TIMEOUT is not a number: {timeout!r}") from None

    skip = os.environ.get("COMMITGATE_SKIP_CHECKS")
    if skip is not None:
        result["skip"] = [s.strip() for s in skip.split(",") if s.strip()]

    return result


def _merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge configuration dictionaries; later ones take precedence."""
    result: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is not None:
                result[key] = value
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> GateConfig:
    """Load configuration with full precedence chain.

    Precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (COMMITGATE_*)
    3. .commitgaterc file
    4. pyproject.toml [tool.commitgate] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved GateConfig instance.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    pyproject_config = _load_from_pyproject(start_dir)
    rc_config = _load_from_rc(start_dir)
    env_config = _load_from_env()

    valid_fields = _get_config_field_names()
    cli_config = {
        k: v for k, v in (cli_overrides or {}).items() if k in valid_fields and v is not None
    }

    merged = _merge_configs(pyproject_config, rc_config, env_config, cli_config)
    return GateConfig(**merged)
