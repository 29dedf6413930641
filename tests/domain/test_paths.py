"""Tests for the read and write path gates."""

from __future__ import annotations

from pathlib import Path

import pytest

from docshelf.domain.paths import (
    is_safe_read_path,
    is_safe_write_path,
    is_system_file,
    is_within,
    split_slug_path,
)

UNSAFE = ["../etc/passwd", "guide/../../x", "/etc/passwd", "guide/\0intro", ".."]


class TestReadGate:
    @pytest.mark.parametrize("path", UNSAFE)
    def test_rejects_traversal_absolute_and_nul(self, path: str) -> None:
        assert is_safe_read_path(path) is False

    @pytest.mark.parametrize("path", ["", "index", "guide/intro", "guide/sub/page"])
    def test_accepts_plain_slug_paths(self, path: str) -> None:
        assert is_safe_read_path(path) is True

    def test_dot_segments_pass_read_gate(self) -> None:
        assert is_safe_read_path("guide/.hidden") is True


class TestWriteGate:
    @pytest.mark.parametrize("path", UNSAFE)
    def test_rejects_everything_the_read_gate_rejects(self, path: str, tmp_path: Path) -> None:
        assert is_safe_write_path(path, tmp_path) is None

    @pytest.mark.parametrize("char", list('<>:"|?*\\'))
    def test_rejects_forbidden_characters(self, char: str, tmp_path: Path) -> None:
        assert is_safe_write_path(f"guide/a{char}b", tmp_path) is None

    @pytest.mark.parametrize("path", [".git", "guide/.env", ".protected", "a/.hidden/b"])
    def test_rejects_hidden_segments(self, path: str, tmp_path: Path) -> None:
        assert is_safe_write_path(path, tmp_path) is None

    def test_returns_canonical_root(self, tmp_path: Path) -> None:
        assert is_safe_write_path("guide/intro", tmp_path) == tmp_path.resolve()

    def test_fails_closed_when_root_missing(self, tmp_path: Path) -> None:
        assert is_safe_write_path("guide/intro", tmp_path / "missing") is None

    def test_fails_closed_when_root_is_a_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file"
        target.write_text("x")
        assert is_safe_write_path("guide/intro", target) is None


class TestSystemFiles:
    @pytest.mark.parametrize(
        "name",
        [".htaccess", ".protected", ".gitignore", ".git", ".env", ".DS_Store", ".anything"],
    )
    def test_reserved_and_hidden_names(self, name: str) -> None:
        assert is_system_file(name) is True

    def test_checks_basename_only(self) -> None:
        assert is_system_file("guide/.env") is True
        assert is_system_file(".config/page.md") is False

    def test_regular_names(self) -> None:
        assert is_system_file("01-intro.md") is False
        assert is_system_file("index.md") is False


class TestHelpers:
    def test_split_drops_empty_segments(self) -> None:
        assert split_slug_path("/guide//intro/") == ["guide", "intro"]
        assert split_slug_path("") == []

    def test_is_within(self, tmp_path: Path) -> None:
        assert is_within(tmp_path / "a" / "b", tmp_path)
        assert not is_within(tmp_path / ".." / "elsewhere", tmp_path)
