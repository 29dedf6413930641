"""Slug codec — on-disk names to public slugs and back.

A name like ``03-getting-started.md`` has the slug ``getting-started`` and
the display name ``Getting Started``. The ``NN-`` ordering prefix only
controls sort order and insertion slots; it never shows up in a URL.

INVARIANT: every component (resolver, tree builder, link rewriter) derives
slugs through :func:`slug_for` so they agree on what a URL segment means.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import PurePosixPath

_PREFIX_PATTERN = re.compile(r"^(\d+)-")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_UNSAFE_SLUG_CHARS = re.compile(r"[^a-z0-9-]")
_DASH_RUNS = re.compile(r"-+")

UNTITLED = "untitled"
MARKDOWN_SUFFIX = ".md"


def strip_prefix(name: str) -> str:
    """Remove a leading ``NN-`` ordering prefix.

    Examples:
        >>> strip_prefix("01-getting-started")
        'getting-started'
        >>> strip_prefix("getting-started")
        'getting-started'
    """
    return _PREFIX_PATTERN.sub("", name, count=1)


def ordering_prefix(name: str) -> int | None:
    """Return the numeric ordering prefix of *name*, or None."""
    match = _PREFIX_PATTERN.match(name)
    if match is None:
        return None
    return int(match.group(1))


def slug_for(filename: str) -> str:
    """Slug of an on-disk name: last extension dropped, prefix stripped.

    Case and word separators are preserved.

    Examples:
        >>> slug_for("02-Setup_Guide.md")
        'Setup_Guide'
        >>> slug_for("01-guide")
        'guide'
    """
    return strip_prefix(PurePosixPath(filename).stem)


def to_title_case(text: str) -> str:
    """Replace ``_``/``-`` with spaces and upper-case each word's first letter.

    The rest of each word is left alone (``API-docs`` -> ``API Docs``).
    """
    spaced = text.replace("_", " ").replace("-", " ")
    return re.sub(r"(^|\s)(\S)", lambda m: m.group(1) + m.group(2).upper(), spaced)


def display_name(filename: str) -> str:
    """Human-readable name for sidebars and tabs."""
    return to_title_case(slug_for(filename))


def sort_key(name: str) -> tuple[int, int, str]:
    """Sort by ordering prefix, unprefixed entries last, then case-insensitively."""
    prefix = ordering_prefix(name)
    if prefix is None:
        return (1, 0, name.casefold())
    return (0, prefix, name.casefold())


def sort_entries(names: Iterable[str]) -> list[str]:
    """Return *names* in navigation order."""
    return sorted(names, key=sort_key)


def next_prefix(entries: Iterable[str]) -> str:
    """Next free ordering prefix among *entries*, zero-padded to width 2.

    Values past 99 simply widen (``"100"``).

    Examples:
        >>> next_prefix(["01-intro.md", "02-setup.md", "index.md"])
        '03'
        >>> next_prefix([])
        '01'
    """
    highest = 0
    for entry in entries:
        prefix = ordering_prefix(entry)
        if prefix is not None and prefix > highest:
            highest = prefix
    return f"{highest + 1:02d}"


def sanitize_filename(value: str) -> str:
    """Make *value* safe to use as a single path component."""
    name = value.replace("/", "").replace("\\", "").replace("\0", "")
    name = _UNSAFE_FILENAME_CHARS.sub("-", name)
    name = _DASH_RUNS.sub("-", name).strip("-")
    return name or UNTITLED


def title_to_slug(title: str) -> str:
    """Derive a kebab-case slug from a page title.

    Examples:
        >>> title_to_slug("My Page")
        'my-page'
        >>> title_to_slug("  ***  ")
        'untitled'
    """
    slug = title.lower().replace(" ", "-").replace("_", "-")
    slug = _UNSAFE_SLUG_CHARS.sub("", slug)
    slug = _DASH_RUNS.sub("-", slug).strip("-")
    return slug or UNTITLED


def ensure_markdown_extension(filename: str) -> str:
    """Give *filename* a lowercase ``.md`` suffix.

    An existing suffix in another case is normalised, since only ``.md``
    files are resolved and listed.
    """
    if filename.lower().endswith(MARKDOWN_SUFFIX):
        filename = filename[: -len(MARKDOWN_SUFFIX)]
    return filename + MARKDOWN_SUFFIX


def slug_path(relative: str) -> str:
    """Public slug path of a content-root-relative on-disk path.

    Examples:
        >>> slug_path("01-guide/03-my-page.md")
        'guide/my-page'
        >>> slug_path("01-guide/02-sub/index.md")
        'guide/sub'
    """
    parts = [part for part in relative.split("/") if part]
    if parts and is_index_file(parts[-1]):
        parts = parts[:-1]
    return "/".join(slug_for(part) for part in parts)


def is_markdown(filename: str) -> bool:
    """True for ``*.md`` names (case-sensitive, like the content tree)."""
    return PurePosixPath(filename).suffix == MARKDOWN_SUFFIX


def is_index_file(filename: str) -> bool:
    """True for a directory landing page (``index.md``)."""
    return filename == "index" + MARKDOWN_SUFFIX
