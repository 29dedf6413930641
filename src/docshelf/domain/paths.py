"""Path gates — reject unsafe slug paths before any filesystem access.

Both gates are pure predicates: malformed-but-harmless input is rejected,
never raised on. Every resolving or mutating operation must pass the
matching gate first.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

# Basenames that are never editable through the site, whatever their case.
SYSTEM_FILES = frozenset({".htaccess", ".protected", ".gitignore", ".git", ".env", ".ds_store"})

# Marker file that puts a section behind a password.
PROTECTED_MARKER = ".protected"

_FORBIDDEN_WRITE_CHARS = re.compile(r'[<>:"|?*\\]')


def is_safe_read_path(path: str) -> bool:
    """Read gate: no ``..``, no leading ``/``, no NUL byte."""
    if ".." in path:
        return False
    if path.startswith("/"):
        return False
    return "\0" not in path


def is_safe_write_path(path: str, content_root: Path) -> Path | None:
    """Write gate.

    Applies the read gate, rejects ``<>:"|?*\\``, rejects any segment that
    starts with ``.``, and requires *content_root* to be an existing
    directory. Returns the canonical content root on success, None otherwise.
    """
    if not is_safe_read_path(path):
        return None
    if _FORBIDDEN_WRITE_CHARS.search(path):
        return None
    if any(part.startswith(".") for part in path.split("/")):
        return None
    try:
        real_root = content_root.resolve(strict=True)
    except OSError:
        return None
    if not real_root.is_dir():
        return None
    return real_root


def is_system_file(name: str) -> bool:
    """True for reserved names and any hidden file."""
    basename = PurePosixPath(name).name
    if basename.lower() in SYSTEM_FILES:
        return True
    return basename.startswith(".")


def is_within(path: Path, root: Path) -> bool:
    """True when *path* stays inside *root* once both are canonicalised."""
    return path.resolve().is_relative_to(root.resolve())


def split_slug_path(path: str) -> list[str]:
    """Split a slug path into segments, dropping empty ones."""
    return [part for part in path.split("/") if part]
