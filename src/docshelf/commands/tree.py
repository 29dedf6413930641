"""Command: print the navigation tree."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docshelf.commands._base import DocshelfCommand

if TYPE_CHECKING:
    from docshelf.commands._context import AppContext


@click.command(
    cls=DocshelfCommand,
    examples="""\
  docshelf tree
  docshelf tree guide
  docshelf tree --all
  docshelf -q tree guide""",
)
@click.argument("section", required=False)
@click.option("--all", "all_sections", is_flag=True, help="Every section with its tree.")
@click.pass_obj
def tree(app: AppContext, section: str | None, all_sections: bool) -> None:
    """Show the sidebar tree of SECTION (default: the whole content root)."""
    from docshelf.services.content import ContentService

    service = ContentService(app.site)
    if all_sections:
        app.emit(service.get_site_tree())
    else:
        app.emit(service.get_tree(section))
