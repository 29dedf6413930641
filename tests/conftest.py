"""Shared pytest fixtures and test helpers for docshelf tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from docshelf.config.settings import DocshelfSettings
from docshelf.domain.models import EditorIdentity
from docshelf.infrastructure.site import Site


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Temporary content tree.

    Layout::

        content/
          index.md
          01-guide/
            index.md
            01-intro.md
            02-setup.md
            03-advanced/
              index.md
              01-tuning.md
          02-reference/
            .protected
            01-api.md
          03-empty/
    """
    root = tmp_path / "content"
    guide = root / "01-guide"
    advanced = guide / "03-advanced"
    reference = root / "02-reference"
    advanced.mkdir(parents=True)
    reference.mkdir()
    (root / "03-empty").mkdir()

    (root / "index.md").write_text("# Welcome\n\nStart here.\n")
    (guide / "index.md").write_text("# Guide\n\nThe guide.\n")
    (guide / "01-intro.md").write_text("# Intro\n\nHello.\n")
    (guide / "02-setup.md").write_text("# Setup\n\nInstall it.\n")
    (advanced / "index.md").write_text("# Advanced\n")
    (advanced / "01-tuning.md").write_text("Tuning without a heading.\n")
    (reference / ".protected").write_text("secret\n")
    (reference / "01-api.md").write_text("# API\n")
    return root


def make_settings(content_root: Path, **overrides: object) -> DocshelfSettings:
    """Settings pointing at *content_root*, isolated from any docshelf.toml."""
    return DocshelfSettings.from_cli(
        site_root=content_root.parent,
        content_dir=str(content_root),
        **overrides,
    )


@pytest.fixture
def site(content_root: Path, monkeypatch: pytest.MonkeyPatch) -> Site:
    """Site over the fixture content tree, backups in ``<tmp>/.backups``."""
    monkeypatch.delenv("DOCSHELF_CONFIG", raising=False)
    return Site(make_settings(content_root))


@pytest.fixture
def editor() -> EditorIdentity:
    """An authenticated editor."""
    return EditorIdentity(name="tester", authenticated=True)


@pytest.fixture
def _isolated_site(content_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from the content tree's parent so ``content/`` is the default.

    Use via ``@pytest.mark.usefixtures("_isolated_site")`` on command test
    classes.
    """
    monkeypatch.delenv("DOCSHELF_CONFIG", raising=False)
    monkeypatch.chdir(content_root.parent)


def snapshot(root: Path) -> dict[str, str | None]:
    """Every entry under *root* with file contents (None for directories)."""
    state: dict[str, str | None] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        state[rel] = None if path.is_dir() else path.read_text()
    return state
