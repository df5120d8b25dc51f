"""External tool discovery and invocation.

ToolLocator is the single place that searches PATH, helper locations inside
the repository and the local settings file. Checks receive an optional
ToolCommand and never look at the filesystem themselves.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

# Setting that routes helpers through the dependency-execution wrapper
USE_CARTON_SETTING = "COMMITGATE_USE_CARTON"
CARTON_PREFIX = ("carton", "exec")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def is_truthy(value: str | None) -> bool:
    """Interpret a shell-style flag value."""
    return value is not None and value.strip().lower() in _TRUTHY


def tool_argument(path: str) -> str:
    """Pass a repository-relative path so a tool cannot read it as an option."""
    return f"./{path}" if path.startswith("-") else path


@dataclass(frozen=True)
class ToolCommand:
    """A resolved command line; file arguments are appended at run time."""

    argv: tuple[str, ...]

    def render(self, arguments: Sequence[str] = ()) -> str:
        """Render the command as a copy-pasteable shell string."""
        return shlex.join([*self.argv, *arguments])


@dataclass(frozen=True)
class ToolOutput:
    """Result of one external tool invocation.

    Attributes:
        returncode: Exit status; None when the tool could not complete.
        output: Combined stdout and stderr.
        error: Launch or timeout error text, None on normal completion.
    """

    returncode: int | None
    output: str
    error: str | None = None

    @property
    def lines(self) -> list[str]:
        return self.output.splitlines()


def parse_local_settings(content: str) -> dict[str, str]:
    """Parse shell-style `KEY=value` assignments.

    Accepts an optional `export` prefix, quoting and `#` comments. Lines
    that are not plain assignments are ignored; nothing is executed.
    """
    settings: dict[str, str] = {}

    for raw in content.splitlines():
        try:
            tokens = shlex.split(raw, comments=True)
        except ValueError:
            continue
        if tokens and tokens[0] == "export":
            tokens = tokens[1:]
        if len(tokens) != 1 or "=" not in tokens[0]:
            continue
        key, value = tokens[0].split("=", 1)
        if key.isidentifier():
            settings[key] = value

    return settings


class ToolLocator:
    """Finds external tools for tool-based checks.

    Attributes:
        repo_root: Root of the git work tree; helper candidates are relative to it.
        local_settings_path: Optional shell-style settings file.
        search_path: PATH override for executable lookup (None uses PATH).
        environ: Environment consulted for settings not in the local file.
    """

    def __init__(
        self,
        repo_root: Path,
        local_settings_path: Path | None = None,
        search_path: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.repo_root = repo_root
        self.local_settings_path = local_settings_path
        self.search_path = search_path
        self.environ = os.environ if environ is None else environ
        self._settings: dict[str, str] | None = None

    def local_settings(self) -> dict[str, str]:
        """Load the local settings file once; missing or unreadable means empty."""
        if self._settings is None:
            self._settings = {}
            if self.local_settings_path is not None and self.local_settings_path.is_file():
                try:
                    content = self.local_settings_path.read_text(encoding="utf-8")
                except OSError:
                    content = ""
                self._settings = parse_local_settings(content)
        return self._settings

    def setting(self, name: str) -> str | None:
        """Look up a setting; the local file overrides the environment."""
        settings = self.local_settings()
        if name in settings:
            return settings[name]
        return self.environ.get(name)

    def find_executable(self, name: str) -> str | None:
        """Resolve a command name on PATH, or an explicit path."""
        return shutil.which(name, path=self.search_path)

    def find_helper(self, candidates: Sequence[str]) -> Path | None:
        """Return the first candidate that is an executable file in the repository."""
        for candidate in candidates:
            path = self.repo_root / candidate
            if path.is_file() and os.access(path, os.X_OK):
                return path
        return None

    def exec_prefix(self) -> tuple[str, ...]:
        """Return the dependency-execution wrapper prefix, if enabled and available."""
        if not is_truthy(self.setting(USE_CARTON_SETTING)):
            return ()
        if self.find_executable(CARTON_PREFIX[0]) is None:
            return ()
        return CARTON_PREFIX

    def locate_command(self, command: Sequence[str]) -> ToolCommand | None:
        """Resolve a configured command line whose first word is looked up on PATH."""
        if not command:
            return None
        executable = self.find_executable(command[0])
        if executable is None:
            return None
        return ToolCommand(argv=(executable, *command[1:]))

    def locate_helper(self, candidates: Sequence[str], wrap: bool = False) -> ToolCommand | None:
        """Resolve a repository helper, optionally behind the exec prefix."""
        helper = self.find_helper(candidates)
        if helper is None:
            return None
        prefix = self.exec_prefix() if wrap else ()
        return ToolCommand(argv=(*prefix, str(helper)))


def run_tool(
    command: ToolCommand,
    arguments: Sequence[str],
    cwd: Path,
    timeout: float | None = None,
) -> ToolOutput:
    """Run an external tool once, capturing combined output.

    Args:
        command: Resolved command line.
        arguments: Extra arguments, usually file paths.
        cwd: Working directory.
        timeout: Seconds before the tool is killed.

    Returns:
        ToolOutput; launch failures and timeouts are reported in `error`.
    """
    argv = [*command.argv, *arguments]
    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.output or ""
        if isinstance(partial, bytes):
            partial = partial.decode("utf-8", errors="replace")
        return ToolOutput(
            returncode=None,
            output=partial,
            error=f"{command.render()} timed out after {timeout:g}s",
        )
    except OSError as e:
        return ToolOutput(returncode=None, output="", error=f"{command.render()}: {e!s}")

    return ToolOutput(returncode=completed.returncode, output=completed.stdout)
