"""Tests for commitgate.staging.git_helper module."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from commitgate.staging.git_helper import (
    ChangeKind,
    ChangeRecord,
    GitStatusError,
    RepositoryNotFoundError,
    find_repo_root,
    parse_name_status,
    read_staged_changes,
)


class TestChangeKind:
    """Tests for ChangeKind.from_status."""

    def test_plain_letters(self) -> None:
        """Test single-letter status fields."""
        assert ChangeKind.from_status("A") is ChangeKind.ADDED
        assert ChangeKind.from_status("M") is ChangeKind.MODIFIED
        assert ChangeKind.from_status("D") is ChangeKind.DELETED
        assert ChangeKind.from_status("T") is ChangeKind.TYPE_CHANGED

    def test_score_suffix(self) -> None:
        """Test rename/copy status fields carrying a similarity score."""
        assert ChangeKind.from_status("R087") is ChangeKind.RENAMED
        assert ChangeKind.from_status("C100") is ChangeKind.COPIED

    def test_unknown_letter(self) -> None:
        """Test that unrecognized letters map to UNKNOWN."""
        assert ChangeKind.from_status("Z") is ChangeKind.UNKNOWN
        assert ChangeKind.from_status("") is ChangeKind.UNKNOWN


class TestParseNameStatus:
    """Tests for parse_name_status function."""

    def test_empty_output(self) -> None:
        """Test that no staged changes give no records."""
        assert parse_name_status("") == []

    def test_simple_entries(self) -> None:
        """Test added, modified and deleted entries keep git order."""
        output = "M\0lib/Foo.pm\0A\0bin/tool\0D\0old.txt\0"
        records = parse_name_status(output)
        assert records == [
            ChangeRecord(path="lib/Foo.pm", kind=ChangeKind.MODIFIED),
            ChangeRecord(path="bin/tool", kind=ChangeKind.ADDED),
            ChangeRecord(path="old.txt", kind=ChangeKind.DELETED),
        ]

    def test_rename_uses_destination(self) -> None:
        """Test that renames report the new path and keep the source."""
        output = "R095\0old/name.py\0new/name.py\0M\0README\0"
        records = parse_name_status(output)
        assert records[0].path == "new/name.py"
        assert records[0].source_path == "old/name.py"
        assert records[0].kind is ChangeKind.RENAMED
        assert records[1].path == "README"

    def test_paths_with_spaces_and_newlines(self) -> None:
        """Test that -z output keeps unusual file names intact."""
        output = "A\0dir with space/file\nname.sh\0"
        records = parse_name_status(output)
        assert records[0].path == "dir with space/file\nname.sh"

    def test_truncated_entry(self) -> None:
        """Test that a status without a path is rejected."""
        with pytest.raises(GitStatusError, match="Truncated"):
            parse_name_status("M\0")

    def test_truncated_rename(self) -> None:
        """Test that a rename with a single path is rejected."""
        with pytest.raises(GitStatusError, match="Truncated"):
            parse_name_status("R100\0only-one\0")

    def test_is_deletion(self) -> None:
        """Test the deletion flag on records."""
        assert ChangeRecord(path="x", kind=ChangeKind.DELETED).is_deletion
        assert not ChangeRecord(path="x", kind=ChangeKind.MODIFIED).is_deletion


class TestReadStagedChanges:
    """Tests for read_staged_changes function."""

    @patch("commitgate.staging.git_helper.subprocess.run")
    def test_success(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test reading and parsing staged changes."""
        mock_run.return_value = MagicMock(returncode=0, stdout="M\0a.py\0", stderr="")
        records = read_staged_changes(tmp_path)
        assert records == [ChangeRecord(path="a.py", kind=ChangeKind.MODIFIED)]

    @patch("commitgate.staging.git_helper.subprocess.run")
    def test_command_arguments(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test that the index is compared against HEAD from the repo root."""
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        read_staged_changes(tmp_path)

        mock_run.assert_called_once()
        call_args = mock_run.call_args
        assert call_args[0][0] == [
            "git", "diff", "--cached", "--name-status", "-z", "-M", "HEAD", "--",
        ]
        assert call_args[1]["cwd"] == tmp_path
        assert call_args[1]["errors"] == "surrogateescape"

    @patch("commitgate.staging.git_helper.subprocess.run")
    def test_no_prior_commit(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test that a failing status query is fatal."""
        mock_run.return_value = MagicMock(
            returncode=128,
            stdout="",
            stderr="fatal: bad revision 'HEAD'",
        )
        with pytest.raises(GitStatusError, match="bad revision"):
            read_staged_changes(tmp_path)

    @patch("commitgate.staging.git_helper.subprocess.run")
    def test_git_missing(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test that a missing git binary is fatal."""
        mock_run.side_effect = FileNotFoundError("git")
        with pytest.raises(GitStatusError, match="Unable to run git"):
            read_staged_changes(tmp_path)


class TestFindRepoRoot:
    """Tests for find_repo_root function."""

    @patch("commitgate.staging.git_helper.subprocess.run")
    def test_success(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test resolving the work tree root."""
        mock_run.return_value = MagicMock(returncode=0, stdout=f"{tmp_path}\n", stderr="")
        assert find_repo_root(tmp_path) == tmp_path.resolve()
        assert mock_run.call_args[1]["errors"] == "surrogateescape"

    @patch("commitgate.staging.git_helper.subprocess.run")
    def test_not_a_repository(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test that a directory outside git raises RepositoryNotFoundError."""
        mock_run.return_value = MagicMock(
            returncode=128,
            stdout="",
            stderr="fatal: not a git repository",
        )
        with pytest.raises(RepositoryNotFoundError, match="not a git repository"):
            find_repo_root(tmp_path)

    @patch("commitgate.staging.git_helper.subprocess.run")
    def test_git_missing(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Test that a missing git binary raises RepositoryNotFoundError."""
        mock_run.side_effect = FileNotFoundError("git")
        with pytest.raises(RepositoryNotFoundError):
            find_repo_root(tmp_path)


def _git(repo: Path, *args: str | bytes) -> None:
    subprocess.run(
        ["git", "-c", "user.name=t", "-c", "user.email=t@example.com", *args],
        cwd=repo,
        check=True,
        capture_output=True,
    )


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestReadStagedChangesWithGit:
    """Tests for read_staged_changes against a real repository."""

    def test_non_utf8_path(self, tmp_path: Path) -> None:
        """Test that a Latin-1 file name is read and still resolves on disk."""
        raw_name = b"caf\xe9.txt"
        try:
            with open(os.path.join(os.fsencode(tmp_path), raw_name), "wb") as f:
                f.write(b"hello\n")
        except (OSError, UnicodeError):
            pytest.skip("filesystem does not accept non-UTF-8 names")

        _git(tmp_path, "init", "-q")
        _git(tmp_path, "commit", "-q", "--allow-empty", "-m", "init")
        _git(tmp_path, "add", raw_name)

        records = read_staged_changes(tmp_path)

        assert len(records) == 1
        assert records[0].kind is ChangeKind.ADDED
        assert os.fsencode(records[0].path) == raw_name
        assert (tmp_path / records[0].path).is_file()
