"""Link rewriting — post-process rendered HTML for the site router.

Pure functions, no infrastructure dependencies. Runs once per rendered
document, after markdown has been converted to HTML:

- ``http(s)://`` links open in a new tab;
- links to ``*.md`` files become clean slug URLs under the routing root,
  resolved relative to the current document;
- everything else passes through untouched.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

from docshelf.domain.slugs import strip_prefix, to_title_case

DEFAULT_BASE_URL = "/docs"

_ANCHOR_PATTERN = re.compile(r"""<a\s+([^>]*?)href=["']([^"']+)["']([^>]*)>""", re.IGNORECASE)
_EXTERNAL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_MARKDOWN_LINK_PATTERN = re.compile(r"\.md(#.*)?$", re.IGNORECASE)
_MD_SUFFIX_PATTERN = re.compile(r"\.md$", re.IGNORECASE)
_HEADING_PATTERN = re.compile(r"<(h[1-6])>(.+?)</\1>", re.IGNORECASE)
_TOC_HEADING_PATTERN = re.compile(
    r"""<(h[2-4])\s+id=["']([^"']+)["']>.*?</\1>""", re.IGNORECASE | re.DOTALL
)
_HEADING_ANCHOR_LINK = re.compile(
    r"""<a[^>]*class=["']heading-anchor["'][^>]*>.*?</a>""", re.IGNORECASE
)
_TAG_PATTERN = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class Heading:
    """A table-of-contents entry."""

    level: int
    id: str
    text: str


@dataclass(frozen=True)
class Crumb:
    """One breadcrumb step."""

    name: str
    slug: str


def document_dir(current_path: str, *, is_index: bool = False) -> str:
    """Directory that relative links in a document resolve against.

    An index document is the landing page of its own slug, so its
    directory is the slug itself.
    """
    if is_index:
        return current_path
    parent = posixpath.dirname(current_path)
    return "" if parent == "." else parent


def resolve_internal_link(href: str, current_dir: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Turn a ``*.md`` href into a clean site URL.

    Examples:
        >>> resolve_internal_link("./sub/page.md#anchor", "guide")
        '/docs/guide/sub/page#anchor'
        >>> resolve_internal_link("../01-other/index.md", "guide/sub")
        '/docs/guide/other'
    """
    anchor = ""
    if "#" in href:
        href, fragment = href.split("#", 1)
        anchor = "#" + fragment

    href = _MD_SUFFIX_PATTERN.sub("", href)
    if href.startswith("./"):
        href = href[2:]

    if not href.startswith("/"):
        if current_dir:
            href = f"{current_dir}/{href}"
        normalized: list[str] = []
        for part in href.split("/"):
            if part == "..":
                if normalized:
                    normalized.pop()
            elif part not in (".", ""):
                normalized.append(part)
        href = "/".join(normalized)

    href = "/".join(strip_prefix(part) for part in href.split("/"))
    url = f"{base_url.rstrip('/')}/{href.lstrip('/')}"

    if url.endswith("/index"):
        url = url[: -len("/index")]
    return url + anchor


def rewrite_links(
    html: str,
    current_path: str,
    is_index: bool = False,
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """Rewrite every anchor tag in *html* for the current document."""
    current_dir = document_dir(current_path, is_index=is_index)

    def _rewrite(match: re.Match[str]) -> str:
        before, href, after = match.group(1), match.group(2), match.group(3)
        if _EXTERNAL_PATTERN.match(href):
            return f'<a {before}href="{href}"{after} target="_blank" rel="noopener noreferrer">'
        if _MARKDOWN_LINK_PATTERN.search(href):
            new_href = resolve_internal_link(href, current_dir, base_url)
            return f'<a {before}href="{new_href}"{after}>'
        return match.group(0)

    return _ANCHOR_PATTERN.sub(_rewrite, html)


def heading_slug(text: str) -> str:
    """URL fragment for a heading's plain text."""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def add_heading_anchors(html: str) -> str:
    """Give every bare ``<hN>`` an id and a trailing ``#`` permalink."""

    def _anchor(match: re.Match[str]) -> str:
        tag, text = match.group(1), match.group(2)
        anchor_id = heading_slug(_TAG_PATTERN.sub("", text))
        return (
            f'<{tag} id="{anchor_id}">{text} '
            f'<a href="#{anchor_id}" class="heading-anchor">#</a></{tag}>'
        )

    return _HEADING_PATTERN.sub(_anchor, html)


def extract_headings(html: str) -> list[Heading]:
    """Collect h2–h4 headings (with ids) for a table of contents."""
    headings: list[Heading] = []
    for match in _TOC_HEADING_PATTERN.finditer(html):
        without_permalink = _HEADING_ANCHOR_LINK.sub("", match.group(0))
        text = _TAG_PATTERN.sub("", without_permalink).strip()
        headings.append(Heading(level=int(match.group(1)[1]), id=match.group(2), text=text))
    return headings


def build_breadcrumb(path: str) -> list[Crumb]:
    """Breadcrumb trail for a slug path (empty for the site root)."""
    if not path or path == "index":
        return []
    crumbs: list[Crumb] = []
    current = ""
    for part in path.split("/"):
        current = f"{current}/{part}" if current else part
        crumbs.append(Crumb(name=to_title_case(part), slug=current))
    return crumbs
