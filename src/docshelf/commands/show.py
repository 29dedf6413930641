"""Command: show a document the way the renderer receives it."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    cls=DocshelfCommand,
    examples="""\
  docshelf show
  docshelf show guide/intro
  docshelf -q show guide/setup > setup.md""",
)
@click.argument("path", default="")
@click.pass_obj
def show(app: AppContext, path: str) -> None:
    """Resolve PATH (a slug path; empty for the landing page) and show it."""
    from docshelf.services.content import ContentService

    app.emit(ContentService(app.site).get_doc(path))
