"""Command: delete a document (backed up first) or an empty folder."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    cls=DocshelfCommand,
    examples="""\
  docshelf rm guide/setup
  docshelf rm guide/sub          # deletes guide/sub's index.md
  docshelf rm guide/sub --dir    # removes the folder once it is empty""",
)
@click.argument("path")
@click.option("--dir", "directory", is_flag=True, help="Only remove an empty folder.")
@click.pass_obj
def rm(app: AppContext, path: str, directory: bool) -> None:
    """Delete the document or empty folder at PATH."""
    from docshelf.services.editor import EditorService

    service = EditorService(app.site)
    if directory:
        app.emit(service.delete_directory(app.identity, path))
    else:
        app.emit(service.delete(app.identity, path))
