"""Navigation tree builder.

Walks the content directory depth-first and returns ordered
:class:`~docshelf.domain.models.TreeNode` lists. ``index.md`` files are left
out (they are reached through their parent's slug), as are hidden entries
and non-markdown files. A directory with nothing renderable underneath is
pruned entirely.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from docshelf.domain.models import Section, TreeNode
from docshelf.domain.paths import PROTECTED_MARKER
from docshelf.domain.slugs import (
    display_name,
    is_index_file,
    is_markdown,
    slug_for,
    sort_entries,
)
from docshelf.domain.types import NodeType

logger = logging.getLogger(__name__)


def _list(directory: Path) -> list[str]:
    try:
        names = os.listdir(directory)
    except OSError:
        logger.debug("Cannot list %s", directory, exc_info=True)
        return []
    return sort_entries(name for name in names if not name.startswith("."))


def _build_node(directory: Path, name: str, base_path: str) -> TreeNode | None:
    """Node for one entry, or None when it has nothing to show."""
    full_path = directory / name
    slug = f"{base_path}/{slug_for(name)}" if base_path else slug_for(name)

    if full_path.is_dir():
        children = build_tree(full_path, slug)
        if not children:
            return None
        return TreeNode(type=NodeType.DIR, name=display_name(name), slug=slug, children=children)

    if is_markdown(name) and not is_index_file(name):
        return TreeNode(type=NodeType.FILE, name=display_name(name), slug=slug)
    return None


def build_tree(directory: Path, base_path: str = "") -> list[TreeNode]:
    """Ordered navigation nodes under *directory*.

    Each child's slug is ``base_path/own-slug``.
    """
    nodes: list[TreeNode] = []
    for name in _list(directory):
        node = _build_node(directory, name, base_path)
        if node is not None:
            nodes.append(node)
    return nodes


class TreeBuilder:
    """Sections and sidebar trees for one content root."""

    def __init__(self, content_root: Path) -> None:
        self._root = content_root

    def get_sections(self) -> list[Section]:
        """Top-level directories, in navigation order (tab bar)."""
        sections: list[Section] = []
        for name in _list(self._root):
            full_path = self._root / name
            if not full_path.is_dir():
                continue
            sections.append(
                Section(
                    name=display_name(name),
                    slug=slug_for(name),
                    protected=(full_path / PROTECTED_MARKER).exists(),
                )
            )
        return sections

    def section_dir(self, section: str) -> Path | None:
        """Directory behind a section slug."""
        for name in _list(self._root):
            full_path = self._root / name
            if full_path.is_dir() and slug_for(name) == section:
                return full_path
        return None

    def get_tree(self, section: str | None = None) -> list[TreeNode]:
        """Sidebar tree for *section*, or for the whole content root."""
        if not section:
            return build_tree(self._root)
        section_path = self.section_dir(section)
        if section_path is None:
            return []
        return build_tree(section_path, section)

    def is_section_protected(self, section: str) -> bool:
        """True when the section carries the password marker file."""
        section_path = self.section_dir(section)
        return section_path is not None and (section_path / PROTECTED_MARKER).exists()
