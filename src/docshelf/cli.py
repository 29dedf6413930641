"""Root CLI group for docshelf with global flags and command registration."""

from __future__ import annotations

import click

from docshelf import __version__
from docshelf.commands import register_commands
from docshelf.commands._base import DocshelfGroup
from docshelf.commands._context import AppContext
from docshelf.config.settings import DocshelfSettings


@click.group(
    cls=DocshelfGroup,
    invoke_without_command=True,
    examples="""\
  docshelf tree
  docshelf --content-dir ./content show guide/intro
  docshelf --json new guide "My Page"
  docshelf -c site/docshelf.toml rm guide/old-page""",
)
@click.version_option(version=__version__, prog_name="docshelf")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False, resolve_path=True, path_type=str),
    default=None,
    help="Content directory (overrides [site] content_dir).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    content_dir: str | None,
) -> None:
    """docshelf: browse and edit a folder-based markdown documentation site."""
    settings = DocshelfSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        content_dir=content_dir,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
