"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, docshelf.toml only contains
overrides. A fresh site needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SiteConfig(BaseModel):
    """[site] section."""

    model_config = {"frozen": True}

    name: str = "Docshelf"
    content_dir: str = "content"
    # None -> "<content_dir parent>/.backups"
    backup_dir: str | None = None
    base_url: str = "/docs"


class EditorConfig(BaseModel):
    """[editor] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    require_backup: bool = False
    lock_timeout: float = Field(default=5.0, ge=0)
    strict_slugs: bool = False

