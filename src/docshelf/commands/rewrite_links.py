"""Command: post-process rendered HTML for one document."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    "rewrite-links",
    cls=DocshelfCommand,
    examples="""\
  pandoc guide.md | docshelf -q rewrite-links guide/intro
  docshelf rewrite-links guide/sub --index < sub.html
  docshelf -v rewrite-links guide/intro < intro.html""",
)
@click.argument("path")
@click.option("--index", "is_index", is_flag=True, help="PATH is a directory landing page.")
@click.pass_obj
def rewrite_links(app: AppContext, path: str, is_index: bool) -> None:
    """Read HTML on stdin; rewrite .md links and anchor headings for PATH."""
    from docshelf.services.content import ContentService

    html = click.get_text_stream("stdin").read()
    app.emit(ContentService(app.site).render_html(html, path, is_index=is_index))
