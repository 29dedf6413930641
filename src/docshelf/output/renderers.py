"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a StringIO-backed Console; :func:`render_result`
picks one by ``result.op`` and returns the text. Unknown ops fall through
to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from docshelf.output.console import create_console, get_output, style_for_node

if TYPE_CHECKING:
    from rich.console import Console

    from docshelf.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: slugs, raw content, or a status line."""
    if not result.ok:
        return _error_line(result)

    d = result.data
    if result.op == "tree":
        return "\n".join(_flatten_slugs(d.get("items", [])))
    if result.op == "sections":
        return "\n".join(s["slug"] for s in d.get("sections", []))
    if result.op == "read":
        return str(d.get("content", ""))
    if result.op == "get_doc":
        return str(d.get("markdown", ""))
    if result.op == "render_html":
        return str(d.get("html", ""))
    for key in ("new_path", "path"):
        if d.get(key):
            return str(d[key])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _error_line(result: ServiceResult) -> str:
    err = result.error
    if err is None:
        return f"ERROR: {result.op}: Unknown error"
    return f"ERROR: {result.op} [{err.code}] {err.message}"


def _flatten_slugs(items: list[dict[str, Any]]) -> list[str]:
    """Depth-first slugs of every node under *items*."""
    slugs: list[str] = []
    for item in items:
        slugs.append(item["slug"])
        slugs.extend(_flatten_slugs(item.get("children", [])))
    return slugs


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="ds.ok")
    op = Text(f"  {result.op}", style="ds.op")
    console.print(label, op, sep="", end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ds.key")
    if key in ("path", "new_path", "old_path", "slug"):
        v = Text(str(value), style="ds.slug")
    elif key in ("real_path", "backup_file"):
        v = Text(str(value), style="ds.path")
    elif key == "title":
        v = Text(str(value), style="ds.title")
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Meta block, including the telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _add_nodes(branch: Tree, items: list[dict[str, Any]], *, verbose: bool) -> None:
    for item in items:
        node_type = str(item.get("type", ""))
        label = Text(str(item.get("name", "")), style=style_for_node(node_type))
        if verbose:
            label.append(f"  {item.get('slug', '')}", style="ds.path")
        if item.get("protected"):
            label.append("  [protected]", style="ds.protected")
        child = branch.add(label)
        _add_nodes(child, item.get("children", []), verbose=verbose)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="ds.error")
    op = Text(f"  {result.op}", style="ds.op")
    code = Text(f" [{err.code}] " if err else " ", style="ds.warning")
    console.print(label, op, code, Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Navigation renderers ──────────────────────────────────────────────


def _render_sections(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    sections = result.data.get("sections", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Slug", style="ds.slug", no_wrap=True)
    table.add_column("Name", style="ds.title")
    table.add_column("Protected")
    for section in sections:
        table.add_row(
            str(section.get("slug", "")),
            str(section.get("name", "")),
            "yes" if section.get("protected") else "",
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(sections))} sections")
    if verbose:
        _render_meta(console, result)


def _render_tree(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Sidebar tree (``tree``) or the whole site (``site_tree``)."""
    title = result.data.get("section") or "content"
    root = Tree(Text(str(title), style="ds.node.section"))
    items = result.data.get("items", [])
    _add_nodes(root, items, verbose=verbose)
    console.print(root)
    if not items:
        console.print(Text("  (no documents)", style="dim"))
    if verbose:
        _render_meta(console, result)


def _render_section_status(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    for key in ("section", "exists", "protected"):
        _field(console, key, result.data.get(key))


# ── Document renderers ────────────────────────────────────────────────


def _render_document(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """``get_doc`` and ``read``: a panel with the raw markdown."""
    d = result.data
    body = d.get("markdown", d.get("content", ""))
    lines: list[str] = []
    crumbs = d.get("breadcrumb")
    if crumbs:
        lines.append(" / ".join(c["name"] for c in crumbs))
    for key in ("real_path", "last_modified", "size"):
        if d.get(key) is not None:
            lines.append(f"{key}: {d[key]}")
    if d.get("is_index"):
        lines.append("index: yes")

    content = "\n".join(lines)
    if body.strip():
        content = f"{content}\n\n{body.strip()}" if content else body.strip()

    slug = d.get("slug", d.get("path", "")) or "index"
    title = f"{slug}: {d.get('title', 'Untitled')}"
    console.print(Panel(Text(content), title=title, border_style="dim", expand=False))
    if verbose:
        _render_meta(console, result)


def _render_html(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    console.print(result.data.get("html", ""), markup=False)
    if verbose:
        headings = result.data.get("headings", [])
        if headings:
            console.print()
            console.print(Text("  contents:", style="dim"))
            for h in headings:
                indent = "  " * (h["level"] - 1)
                console.print(f"  {indent}{h['text']}  #{h['id']}", markup=False)
        _render_meta(console, result)


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """create / update / delete / move results."""
    _status_line(console, result)
    for key in (
        "path",
        "old_path",
        "new_path",
        "real_path",
        "filename",
        "type",
        "backup_file",
        "last_modified",
    ):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Status line plus every data field."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Navigation
    "sections": _render_sections,
    "tree": _render_tree,
    "site_tree": _render_tree,
    "section_status": _render_section_status,
    # Documents
    "get_doc": _render_document,
    "read": _render_document,
    "render_html": _render_html,
    # Mutations
    "create": _render_mutation,
    "update": _render_mutation,
    "delete": _render_mutation,
    "delete_directory": _render_mutation,
    "move": _render_mutation,
}
