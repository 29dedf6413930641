"""Command: replace a document's markdown."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    cls=DocshelfCommand,
    examples="""\
  docshelf edit guide/intro --content "# Intro"
  docshelf edit guide/intro --from-file intro.md
  cat intro.md | docshelf edit guide/intro""",
)
@click.argument("path")
@click.option("--content", default=None, help="New markdown.")
@click.option(
    "--from-file",
    "source",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read the new markdown from a file.",
)
@click.pass_obj
def edit(app: AppContext, path: str, content: str | None, source: IO[str] | None) -> None:
    """Overwrite the document at PATH (content from an option or stdin)."""
    from docshelf.services.editor import EditorService

    if content is not None and source is not None:
        raise click.UsageError("Use either --content or --from-file, not both.")
    if source is not None:
        content = source.read()
    elif content is None:
        stdin = click.get_text_stream("stdin")
        if stdin.isatty():
            raise click.UsageError("No content given: use --content, --from-file or stdin.")
        content = stdin.read()

    app.emit(EditorService(app.site).update(app.identity, path, content))
