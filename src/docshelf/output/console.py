"""Rich Console factory and theme for docshelf output.

Consoles render into a StringIO buffer so renderers keep a
``format_result() -> str`` contract. Outside a terminal (tests, pipes)
Rich drops the color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DOCSHELF_THEME = Theme(
    {
        "ds.ok": "bold green",
        "ds.error": "bold red",
        "ds.warning": "bold yellow",
        "ds.op": "bold cyan",
        "ds.key": "dim",
        "ds.slug": "bold blue",
        "ds.path": "dim",
        "ds.title": "bold",
        "ds.node.dir": "bold magenta",
        "ds.node.file": "green",
        "ds.node.section": "bold cyan",
        "ds.protected": "yellow",
    }
)

_NODE_STYLES: dict[str, str] = {
    "dir": "ds.node.dir",
    "file": "ds.node.file",
    "section": "ds.node.section",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing to an in-memory buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Fixed width, for stable output in tests.
    """
    return Console(
        file=StringIO(),
        theme=DOCSHELF_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Rendered text of a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_node(node_type: str) -> str:
    return _NODE_STYLES.get(node_type, "")
