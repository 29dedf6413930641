"""Command: create a page or a folder."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    cls=DocshelfCommand,
    examples="""\
  docshelf new guide "My Page"
  docshelf new guide "Advanced Topics" --dir
  docshelf new guide/sub "FAQ" --from-file faq.md
  docshelf new "" "Changelog" --filename CHANGELOG""",
)
@click.argument("parent")
@click.argument("name")
@click.option("--dir", "directory", is_flag=True, help="Create a folder instead of a page.")
@click.option("--content", default=None, help="Initial markdown.")
@click.option(
    "--from-file",
    "source",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read initial markdown from a file ('-' for stdin).",
)
@click.option("--filename", default=None, help="Exact on-disk name (no ordering prefix).")
@click.pass_obj
def new(
    app: AppContext,
    parent: str,
    name: str,
    directory: bool,
    content: str | None,
    source: IO[str] | None,
    filename: str | None,
) -> None:
    """Create NAME under the slug directory PARENT (empty for the root).

    Pages get the next ordering prefix of PARENT, so "My Page" next to
    02-setup.md becomes 03-my-page.md.
    """
    from docshelf.services.editor import EditorService

    if content is not None and source is not None:
        raise click.UsageError("Use either --content or --from-file, not both.")
    if source is not None:
        content = source.read()

    app.emit(
        EditorService(app.site).create(
            app.identity,
            parent,
            name,
            directory=directory,
            content=content,
            filename=filename,
        )
    )
