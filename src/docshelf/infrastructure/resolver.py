"""Path resolver — map slug paths onto the content tree.

Lookups walk the tree one segment at a time. Each directory is listed once
per visit and turned into a :class:`DirectoryIndex` (slug -> entries), so a
segment is matched by its *computed slug* rather than its literal name.
That is what lets ``01-guide/02-setup.md`` answer to ``guide/setup``.

Three modes:

- :meth:`PathResolver.resolve` — read mode, for rendering.
- :meth:`PathResolver.resolve_write_path` — write mode, for mutations;
  applies the write gate and reports existence.
- :meth:`PathResolver.resolve_directory_path` — directories only.

Duplicate slugs inside one directory are unsupported. Lookups through an
ambiguous slug log a warning and take the first entry in navigation order;
with ``strict_slugs`` they fail instead.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from docshelf.domain.models import ResolvedDoc, WriteTarget
from docshelf.domain.paths import is_safe_read_path, is_safe_write_path, split_slug_path
from docshelf.domain.slugs import is_markdown, next_prefix, slug_for, sort_entries

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.md"


@dataclass(frozen=True)
class _Entry:
    name: str
    is_dir: bool


@dataclass
class DirectoryIndex:
    """One directory listing keyed by slug.

    Only subdirectories and markdown files are indexed; hidden entries are
    skipped. Entries under a slug keep navigation order.
    """

    directory: Path
    names: list[str] = field(default_factory=list)
    _by_slug: dict[str, list[_Entry]] = field(default_factory=dict, repr=False)

    @classmethod
    def scan(cls, directory: Path) -> DirectoryIndex | None:
        """List *directory*; None when it is missing or unreadable."""
        try:
            names = sort_entries(os.listdir(directory))
        except OSError:
            return None
        index = cls(directory=directory, names=names)
        for name in names:
            if name.startswith("."):
                continue
            is_dir = (directory / name).is_dir()
            if not is_dir and not is_markdown(name):
                continue
            index._by_slug.setdefault(slug_for(name), []).append(_Entry(name, is_dir))
        return index

    def candidates(self, slug: str, *, directories_only: bool = False) -> list[_Entry]:
        entries = self._by_slug.get(slug, [])
        if directories_only:
            return [e for e in entries if e.is_dir]
        return list(entries)

    @property
    def duplicated_slugs(self) -> frozenset[str]:
        """Slugs claimed by more than one entry."""
        return frozenset(slug for slug, entries in self._by_slug.items() if len(entries) > 1)


class PathResolver:
    """Translate slug paths into filesystem paths under *content_root*."""

    def __init__(self, content_root: Path, *, strict_slugs: bool = False) -> None:
        self._root = content_root
        self._strict = strict_slugs

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Segment matching
    # ------------------------------------------------------------------

    def _pick(
        self,
        index: DirectoryIndex,
        slug: str,
        *,
        directories_only: bool,
    ) -> _Entry | None:
        """First matching entry, honouring the duplicate-slug policy."""
        found = index.candidates(slug, directories_only=directories_only)
        if not found:
            return None
        if len(found) > 1:
            names = [e.name for e in found]
            if self._strict:
                logger.warning("Ambiguous slug %r in %s: %s", slug, index.directory, names)
                return None
            logger.warning(
                "Duplicate slug %r in %s, using %s", slug, index.directory, found[0].name
            )
        return found[0]

    def _descend(self, segments: list[str]) -> tuple[Path, list[str]] | None:
        """Walk *segments* from the root, matching directories only."""
        current = self._root
        real_parts: list[str] = []
        for part in segments:
            index = DirectoryIndex.scan(current)
            if index is None:
                return None
            entry = self._pick(index, part, directories_only=True)
            if entry is None:
                return None
            current = current / entry.name
            real_parts.append(entry.name)
        return current, real_parts

    # ------------------------------------------------------------------
    # Read mode
    # ------------------------------------------------------------------

    def resolve(self, path: str) -> ResolvedDoc | None:
        """Locate the markdown file behind a slug path.

        A final segment naming a directory resolves to that directory's
        ``index.md`` (or nothing, if it has none).
        """
        if not is_safe_read_path(path):
            return None
        if not path or path == "index":
            root_index = self._root / INDEX_FILENAME
            return ResolvedDoc(path=root_index, is_index=True) if root_index.is_file() else None

        parts = split_slug_path(path)
        if not parts:
            return None
        walked = self._descend(parts[:-1])
        if walked is None:
            return None
        parent, _ = walked

        index = DirectoryIndex.scan(parent)
        if index is None:
            return None
        entry = self._pick(index, parts[-1], directories_only=False)
        if entry is None:
            return None
        if entry.is_dir:
            landing = parent / entry.name / INDEX_FILENAME
            return ResolvedDoc(path=landing, is_index=True) if landing.is_file() else None
        return ResolvedDoc(path=parent / entry.name, is_index=False)

    # ------------------------------------------------------------------
    # Write mode
    # ------------------------------------------------------------------

    def resolve_write_path(self, path: str) -> WriteTarget | None:
        """Locate an existing document for a mutation.

        Every intermediate directory must already exist. A final segment
        naming a directory targets its ``index.md``; ``exists`` says whether
        that file is actually there.
        """
        if not path:
            return None
        real_root = is_safe_write_path(path, self._root)
        if real_root is None:
            return None

        parts = split_slug_path(path)
        if not parts:
            return None
        walked = self._descend(parts[:-1])
        if walked is None:
            return None
        parent, real_parts = walked

        index = DirectoryIndex.scan(parent)
        if index is None:
            return None
        entry = self._pick(index, parts[-1], directories_only=False)
        if entry is None:
            return None

        if entry.is_dir:
            target = parent / entry.name / INDEX_FILENAME
            real_path = "/".join([*real_parts, entry.name, INDEX_FILENAME])
            result = WriteTarget(
                path=target,
                real_path=real_path,
                exists=target.is_file(),
                is_index=True,
                is_directory=True,
            )
        else:
            result = WriteTarget(
                path=parent / entry.name,
                real_path="/".join([*real_parts, entry.name]),
                exists=True,
                is_index=False,
            )

        if not result.path.resolve().is_relative_to(real_root):
            logger.warning("Write target escapes content root: %s", result.path)
            return None
        return result

    # ------------------------------------------------------------------
    # Directory mode
    # ------------------------------------------------------------------

    def resolve_directory_path(self, path: str) -> Path | None:
        """Locate a directory by slug path; the content root for ``""``."""
        if not is_safe_read_path(path):
            return None
        parts = split_slug_path(path)
        if not parts:
            return self._root if self._root.is_dir() else None
        walked = self._descend(parts)
        if walked is None:
            return None
        return walked[0]

    def actual_filename(self, directory: str, slug: str) -> str | None:
        """On-disk name (prefix and extension kept) of *slug* in *directory*."""
        dir_path = self.resolve_directory_path(directory)
        if dir_path is None:
            return None
        index = DirectoryIndex.scan(dir_path)
        if index is None:
            return None
        entry = self._pick(index, slug, directories_only=False)
        return entry.name if entry is not None else None

    def next_prefix(self, directory: str) -> str:
        """Next ordering prefix inside the slug directory *directory*."""
        dir_path = self.resolve_directory_path(directory)
        if dir_path is None:
            return "01"
        index = DirectoryIndex.scan(dir_path)
        if index is None:
            return "01"
        return next_prefix(index.names)

    def is_directory_empty(self, path: str) -> bool:
        """True when the slug directory exists and holds no entries at all."""
        dir_path = self.resolve_directory_path(path)
        if dir_path is None:
            return False
        index = DirectoryIndex.scan(dir_path)
        return index is not None and not index.names

    def relative(self, path: Path) -> str:
        """Content-root-relative POSIX form of *path*."""
        return path.relative_to(self._root).as_posix()
