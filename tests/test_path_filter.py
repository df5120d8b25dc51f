"""Tests for commitgate.staging.path_filter module."""

from __future__ import annotations

from pathlib import Path

from commitgate.staging.path_filter import filter_ignored, is_ignored, load_ignore_set


class TestLoadIgnoreSet:
    """Tests for load_ignore_set function."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing ignore list means no exclusions."""
        assert load_ignore_set(tmp_path / ".commitgateignore") == frozenset()

    def test_one_path_per_line(self, tmp_path: Path) -> None:
        """Test reading paths, skipping blank lines."""
        ignore_file = tmp_path / ".commitgateignore"
        ignore_file.write_text("vendor/lib/Legacy.pm\n\n  docs/merge-howto.txt  \n")
        assert load_ignore_set(ignore_file) == frozenset(
            {"vendor/lib/Legacy.pm", "docs/merge-howto.txt"}
        )

    def test_final_line_without_newline(self, tmp_path: Path) -> None:
        """Test that the last entry is kept even without a trailing newline."""
        ignore_file = tmp_path / ".commitgateignore"
        ignore_file.write_text("first.txt\nlast.txt")
        assert "last.txt" in load_ignore_set(ignore_file)


class TestFilterIgnored:
    """Tests for exact-match filtering."""

    def test_exact_match_only(self) -> None:
        """Test that no globbing or prefix matching happens."""
        ignore_set = frozenset({"docs/a.txt", "vendor/*", "lib"})
        paths = ["docs/a.txt", "docs/a.txt.bak", "vendor/x.pm", "lib/Foo.pm"]
        assert filter_ignored(paths, ignore_set) == ["docs/a.txt.bak", "vendor/x.pm", "lib/Foo.pm"]

    def test_preserves_order(self) -> None:
        """Test that surviving paths keep their order."""
        assert filter_ignored(["c", "a", "b"], frozenset({"a"})) == ["c", "b"]

    def test_is_ignored(self) -> None:
        """Test membership helper."""
        assert is_ignored("x.py", frozenset({"x.py"}))
        assert not is_ignored("./x.py", frozenset({"x.py"}))
