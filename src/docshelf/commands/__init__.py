"""Subcommand modules for docshelf.

:func:`register_commands` imports each command only at registration time,
keeping module import of ``docshelf.cli`` cheap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register reading and editing commands on the root CLI group."""
    # --- Reading ---
    from docshelf.commands.read import read
    from docshelf.commands.rewrite_links import rewrite_links
    from docshelf.commands.sections import sections
    from docshelf.commands.show import show
    from docshelf.commands.tree import tree

    cli.add_command(sections)
    cli.add_command(tree)
    cli.add_command(show)
    cli.add_command(read)
    cli.add_command(rewrite_links)

    # --- Editing ---
    from docshelf.commands.edit import edit
    from docshelf.commands.mv import mv
    from docshelf.commands.new import new
    from docshelf.commands.rm import rm

    cli.add_command(new)
    cli.add_command(edit)
    cli.add_command(rm)
    cli.add_command(mv)
