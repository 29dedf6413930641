"""Locate the docshelf.toml that applies to a working directory.

``DOCSHELF_CONFIG`` names the file outright. Otherwise the nearest
docshelf.toml in the directory or one of its ancestors is used.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "docshelf.toml"
CONFIG_ENV_VAR = "DOCSHELF_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Config file for *start* (default: cwd), or None.

    A ``DOCSHELF_CONFIG`` that points at a missing file disables the
    walk-up; the site then runs on defaults.
    """
    if explicit := os.environ.get(CONFIG_ENV_VAR):
        candidate = Path(explicit)
        return candidate if candidate.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
