"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``DOCSHELF_*`` prefix
  3. TOML file    — ``docshelf.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the walk-up discovery from :mod:`docshelf.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from docshelf.config.discovery import find_config
from docshelf.config.models import EditorConfig, SiteConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``docshelf.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class DocshelfSettings(BaseSettings):
    """Unified settings for the docshelf CLI and services.

    Attributes:
        site_root: Directory relative paths are resolved against (parent of
            ``docshelf.toml``, or CWD if no config found).
        config_path: The config file in use, if any.
        content_dir: ``--content-dir`` override of ``[site] content_dir``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DOCSHELF_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved paths (not in TOML) ---
    site_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    content_dir: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    site: SiteConfig = Field(default_factory=SiteConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    def _under_root(self, value: str | Path) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.site_root / path

    @property
    def content_path(self) -> Path:
        """Absolute content directory."""
        return self._under_root(self.content_dir or self.site.content_dir)

    @property
    def backup_path(self) -> Path:
        """Absolute backup directory (sibling ``.backups`` by default)."""
        if self.site.backup_dir:
            return self._under_root(self.site.backup_dir)
        return self.content_path.parent / ".backups"

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        site_root: Path | None = None,
        **cli_flags: Any,
    ) -> DocshelfSettings:
        """Construct settings from CLI invocation.

        Discovers ``docshelf.toml`` via walk-up (or explicit *config_path*),
        resolves *site_root* from the config file's parent directory, and
        merges CLI flags as highest-priority overrides. ``None`` flag values
        are dropped so they do not mask TOML or env values.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(site_root)

        resolved_root = site_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        overrides = {k: v for k, v in cli_flags.items() if v is not None}
        _tls.toml_path = toml_path
        try:
            return cls(
                site_root=resolved_root,
                config_path=toml_path,
                **overrides,
            )
        finally:
            _tls.toml_path = None
