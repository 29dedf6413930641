"""ContentService — the read side: documents, navigation, link rewriting.

Everything here re-reads the filesystem on each call. Results feed a
renderer, which gets raw markdown plus title and hands rendered HTML back
through :meth:`ContentService.render_html`.
"""

from __future__ import annotations

import re
from dataclasses import asdict

from docshelf.domain.links import (
    add_heading_anchors,
    build_breadcrumb,
    extract_headings,
    rewrite_links,
)
from docshelf.domain.models import Document
from docshelf.domain.paths import is_safe_read_path
from docshelf.domain.slugs import display_name
from docshelf.domain.types import ErrorCode, NodeType
from docshelf.services.base import BaseService
from docshelf.services.result import ServiceResult
from docshelf.services.telemetry import trace_span, traced

_TITLE_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)


def extract_title(markdown: str) -> str | None:
    """Text of the first level-1 ATX heading, if any."""
    match = _TITLE_PATTERN.search(markdown)
    return match.group(1).strip() if match else None


class ContentService(BaseService):
    """Resolve and read documents; build navigation state."""

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def load_document(self, path: str) -> Document | None:
        """Resolve *path* and read it; None when it does not resolve."""
        resolved = self._site.resolver.resolve(path)
        if resolved is None:
            return None
        try:
            markdown = resolved.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
        title = extract_title(markdown) or display_name(resolved.path.name)
        return Document(slug=path, title=title, markdown=markdown, is_index=resolved.is_index)

    @traced
    def get_doc(self, path: str) -> ServiceResult:
        """Document behind a slug path, for rendering.

        ``""`` and ``"index"`` address the site landing page.
        """
        op = "get_doc"
        if not is_safe_read_path(path):
            return ServiceResult.failure(op, ErrorCode.INVALID_PATH, f"Invalid path: {path!r}")

        with trace_span("resolve"):
            doc = self.load_document(path)
        if doc is None:
            return ServiceResult.failure(op, ErrorCode.NOT_FOUND, f"Not found: {path or 'index'}")

        crumbs = build_breadcrumb(path)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                **doc.model_dump(),
                "breadcrumb": [asdict(c) for c in crumbs],
            },
        )

    @traced
    def get_file(self, path: str) -> ServiceResult:
        """Raw file for the editor.

        Tries write-mode resolution first (gives ``real_path`` and
        ``last_modified``), then falls back to read-mode resolution.
        """
        op = "read"
        if not is_safe_read_path(path):
            return ServiceResult.failure(op, ErrorCode.INVALID_PATH, f"Invalid path: {path!r}")

        target = self._site.resolver.resolve_write_path(path)
        if target is None:
            doc = self.load_document(path)
            if doc is None:
                return ServiceResult.failure(op, ErrorCode.NOT_FOUND, f"File not found: {path}")
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "path": path,
                    "content": doc.markdown,
                    "title": doc.title,
                    "is_index": doc.is_index,
                },
            )

        if not target.exists:
            return ServiceResult.failure(op, ErrorCode.NOT_FOUND, f"File not found: {path}")
        try:
            content = target.path.read_text(encoding="utf-8")
        except OSError as exc:
            return self._from_os_error(op, exc)
        info = self._site.files.file_info(target.real_path) or {}

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": path,
                "real_path": target.real_path,
                "content": content,
                "title": extract_title(content) or display_name(target.path.name),
                "is_index": target.is_index,
                "last_modified": info.get("last_modified"),
                "size": info.get("size"),
            },
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @traced
    def get_sections(self) -> ServiceResult:
        """Top-level sections for the tab bar."""
        sections = self._site.tree.get_sections()
        return ServiceResult(
            ok=True,
            op="sections",
            data={"sections": [s.model_dump() for s in sections], "count": len(sections)},
        )

    @traced
    def get_tree(self, section: str | None = None) -> ServiceResult:
        """Sidebar tree of one section, or of the whole content root."""
        op = "tree"
        if section and self._site.tree.section_dir(section) is None:
            return ServiceResult.failure(op, ErrorCode.NOT_FOUND, f"No such section: {section}")
        with trace_span("build_tree"):
            nodes = self._site.tree.get_tree(section)
        return ServiceResult(
            ok=True,
            op=op,
            data={"section": section, "items": [n.to_dict() for n in nodes]},
        )

    @traced
    def get_site_tree(self) -> ServiceResult:
        """Every section with its sidebar tree (the editor's file browser)."""
        items = []
        for section in self._site.tree.get_sections():
            children = self._site.tree.get_tree(section.slug)
            items.append(
                {
                    "type": str(NodeType.SECTION),
                    "name": section.name,
                    "slug": section.slug,
                    "protected": section.protected,
                    "children": [c.to_dict() for c in children],
                }
            )
        return ServiceResult(ok=True, op="site_tree", data={"items": items})

    @traced
    def section_status(self, section: str) -> ServiceResult:
        """Whether a section exists and sits behind a password."""
        exists = self._site.tree.section_dir(section) is not None
        return ServiceResult(
            ok=True,
            op="section_status",
            data={
                "section": section,
                "exists": exists,
                "protected": exists and self._site.tree.is_section_protected(section),
            },
        )

    # ------------------------------------------------------------------
    # Rendering support
    # ------------------------------------------------------------------

    @traced
    def render_html(self, html: str, path: str, *, is_index: bool = False) -> ServiceResult:
        """Post-process renderer output for the document at *path*.

        Adds heading anchors, rewrites links against the site's routing
        root and collects the h2–h4 table of contents.
        """
        with trace_span("rewrite"):
            anchored = add_heading_anchors(html)
            rewritten = rewrite_links(anchored, path, is_index, base_url=self._site.base_url)
        headings = extract_headings(rewritten)
        return ServiceResult(
            ok=True,
            op="render_html",
            data={"html": rewritten, "headings": [asdict(h) for h in headings]},
        )
