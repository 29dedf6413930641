"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path


def mtime_iso(path: Path) -> str:
    """Modification time of *path* as ISO 8601 in local time."""
    return datetime.fromtimestamp(path.stat().st_mtime).astimezone().isoformat()


def split_parent(path: str) -> tuple[str, str]:
    """Split a slug path into ``(parent, last segment)``.

    Examples:
        >>> split_parent("guide/sub/page")
        ('guide/sub', 'page')
        >>> split_parent("guide")
        ('', 'guide')
    """
    parent, _, name = path.strip("/").rpartition("/")
    return parent, name
