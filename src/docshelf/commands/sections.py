"""Command: list top-level sections, or report on one."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    cls=DocshelfCommand,
    examples="""\
  docshelf sections
  docshelf sections guide
  docshelf --json sections""",
)
@click.argument("section", required=False)
@click.pass_obj
def sections(app: AppContext, section: str | None) -> None:
    """List sections, or show whether SECTION exists and is protected."""
    from docshelf.services.content import ContentService

    service = ContentService(app.site)
    if section:
        app.emit(service.section_status(section))
    else:
        app.emit(service.get_sections())
