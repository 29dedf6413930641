"""Tests for DocshelfSettings: TOML, env vars and CLI flags in one object."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from docshelf.config.settings import DocshelfSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("DOCSHELF_CONFIG", "DOCSHELF_QUIET", "DOCSHELF_CONTENT_DIR"):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = DocshelfSettings.from_cli(site_root=tmp_path)
        assert settings.site_root == tmp_path
        assert settings.config_path is None
        assert settings.site.name == "Docshelf"
        assert settings.site.base_url == "/docs"
        assert settings.editor.enabled is True
        assert settings.editor.require_backup is False
        assert settings.editor.lock_timeout == 5.0
        assert settings.content_path == tmp_path / "content"
        assert settings.backup_path == tmp_path / ".backups"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = DocshelfSettings.from_cli(site_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_sparse_override(self, tmp_path: Path) -> None:
        (tmp_path / "docshelf.toml").write_text(
            '[site]\ncontent_dir = "pages"\n[editor]\nrequire_backup = true\n'
        )
        settings = DocshelfSettings.from_cli(site_root=tmp_path)
        assert settings.content_path == tmp_path / "pages"
        assert settings.editor.require_backup is True
        assert settings.editor.lock_timeout == 5.0

    def test_site_root_from_discovered_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "docshelf.toml").write_text('[site]\nname = "Handbook"\n')
        nested = tmp_path / "content" / "01-guide"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = DocshelfSettings.from_cli()
        assert settings.site_root == tmp_path
        assert settings.site.name == "Handbook"
        assert settings.content_path == tmp_path / "content"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "site.toml"
        custom.parent.mkdir()
        custom.write_text('[site]\nbackup_dir = "/var/backups/docs"\n')
        settings = DocshelfSettings.from_cli(config_path=str(custom), site_root=tmp_path)
        assert settings.config_path == custom
        assert settings.backup_path == Path("/var/backups/docs")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "docshelf.toml").write_text("[site\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            DocshelfSettings.from_cli(site_root=tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "docshelf.toml").write_text("[editor]\nlock_timeout = -1\n")
        with pytest.raises(Exception):
            DocshelfSettings.from_cli(site_root=tmp_path)


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "docshelf.toml").write_text('[site]\nbase_url = "/toml"\n')
        monkeypatch.setenv("DOCSHELF_SITE__BASE_URL", "/env")
        settings = DocshelfSettings.from_cli(site_root=tmp_path)
        assert settings.site.base_url == "/env"

    def test_cli_flags_beat_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCSHELF_QUIET", "true")
        settings = DocshelfSettings.from_cli(site_root=tmp_path, quiet=False)
        assert settings.quiet is False

    def test_none_flags_do_not_mask_lower_sources(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DOCSHELF_CONTENT_DIR", "from-env")
        settings = DocshelfSettings.from_cli(site_root=tmp_path, content_dir=None)
        assert settings.content_path == tmp_path / "from-env"

    def test_content_dir_flag_overrides_site_section(self, tmp_path: Path) -> None:
        (tmp_path / "docshelf.toml").write_text('[site]\ncontent_dir = "pages"\n')
        settings = DocshelfSettings.from_cli(site_root=tmp_path, content_dir="/srv/docs")
        assert settings.content_path == Path("/srv/docs")
