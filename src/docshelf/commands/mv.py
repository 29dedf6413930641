"""Command: move or rename a document or folder."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    cls=DocshelfCommand,
    examples="""\
  docshelf mv guide/setup --to reference/setup
  docshelf mv guide/setup --rename 05-install
  docshelf mv guide/sub --to reference/sub""",
)
@click.argument("path")
@click.option("--to", "destination", default=None, help="Destination slug path.")
@click.option("--rename", "new_filename", default=None, help="New on-disk name, same folder.")
@click.pass_obj
def mv(app: AppContext, path: str, destination: str | None, new_filename: str | None) -> None:
    """Move PATH to another slug path, or rename it in place."""
    from docshelf.services.editor import EditorService

    if (destination is None) == (new_filename is None):
        raise click.UsageError("Give exactly one of --to or --rename.")

    app.emit(
        EditorService(app.site).move(
            app.identity,
            path,
            destination=destination,
            new_filename=new_filename,
        )
    )
