"""Pytest configuration and fixtures for commitgate tests."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")

from commitgate.checks.base import CheckContext  # noqa: E402
from commitgate.checks.tools import ToolLocator  # noqa: E402
from commitgate.config import GateConfig  # noqa: E402
from commitgate.staging.classifier import FileGroup, StagedFile, stage_file  # noqa: E402

COMMITGATE_ENV_VARS = (
    "COMMITGATE_SKIP",
    "COMMITGATE_ARGS",
    "COMMITGATE_IGNORE_FILE",
    "COMMITGATE_LOCAL_SETTINGS_FILE",
    "COMMITGATE_TOOL_TIMEOUT",
    "COMMITGATE_SKIP_CHECKS",
    "COMMITGATE_USE_CARTON",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's COMMITGATE_* settings out of every test."""
    for name in COMMITGATE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A directory standing in for the repository root."""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """An empty directory used as PATH for tool lookups."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def write_file(repo: Path) -> Callable[..., StagedFile]:
    """Write a file into the repository and return it as a StagedFile."""

    def _write(path: str, content: str = "") -> StagedFile:
        location = repo / path
        location.parent.mkdir(parents=True, exist_ok=True)
        location.write_text(content)
        return stage_file(repo, path)

    return _write


def make_executable(path: Path, script: str) -> Path:
    """Write a shell script and mark it executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(script)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def make_context(
    repo: Path,
    config: GateConfig | None = None,
    search_path: str | None = None,
    environ: dict[str, str] | None = None,
) -> CheckContext:
    """Build a CheckContext whose tool lookups only see search_path."""
    config = config or GateConfig()
    locator = ToolLocator(
        repo,
        config.get_local_settings_path(repo),
        search_path=search_path if search_path is not None else "",
        environ=environ or {},
    )
    return CheckContext(repo_root=repo, config=config, locator=locator)


def staged(repo: Path, path: str, group: FileGroup) -> StagedFile:
    """Build a StagedFile without touching the filesystem."""
    return StagedFile(path=path, location=repo / path, exists_on_disk=True, group=group)
