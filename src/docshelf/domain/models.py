"""Content models — documents, sections, navigation nodes, resolution results.

Identity is derived, never stored: a node's slug and display name come from
its on-disk name (see :mod:`docshelf.domain.slugs`).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from docshelf.domain.types import NodeType


class Document(BaseModel):
    """A resolved markdown document, ready to hand to a renderer."""

    model_config = {"frozen": True}

    slug: str
    title: str
    markdown: str
    is_index: bool = False


class Section(BaseModel):
    """A top-level content directory (one tab in the site header)."""

    model_config = {"frozen": True}

    name: str
    slug: str
    protected: bool = False


class TreeNode(BaseModel):
    """One entry of the navigation tree.

    Directory nodes always carry at least one child; empty directories are
    pruned by the tree builder and never appear here.
    """

    model_config = {"frozen": True}

    type: NodeType
    name: str
    slug: str
    children: list[TreeNode] = Field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"type": str(self.type), "name": self.name, "slug": self.slug}
        if self.type != NodeType.FILE:
            data["children"] = [child.to_dict() for child in self.children]
        return data


class EditorIdentity(BaseModel):
    """Capability token for mutations.

    The API layer authenticates the caller and checks CSRF before building
    one of these; the editor service only trusts what it is handed.
    """

    model_config = {"frozen": True}

    name: str = "editor"
    authenticated: bool = False


@dataclass(frozen=True)
class ResolvedDoc:
    """Read-mode resolution result."""

    path: Path
    is_index: bool


@dataclass(frozen=True)
class WriteTarget:
    """Write-mode resolution result.

    ``real_path`` is the content-root-relative on-disk path (prefixes kept).
    """

    path: Path
    real_path: str
    exists: bool
    is_index: bool
    is_directory: bool = False
