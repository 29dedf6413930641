"""Command: read a document's raw source for editing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    cls=DocshelfCommand,
    examples="""\
  docshelf read guide/intro
  docshelf --json read guide/sub""",
)
@click.argument("path")
@click.pass_obj
def read(app: AppContext, path: str) -> None:
    """Print the source of PATH with its on-disk name and modification time."""
    from docshelf.services.content import ContentService

    app.emit(ContentService(app.site).get_file(path))
