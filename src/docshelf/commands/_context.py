"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands through
``@click.pass_obj``. Builds the Site lazily and routes results to
stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docshelf.domain.models import EditorIdentity
from docshelf.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from docshelf.config.settings import DocshelfSettings
    from docshelf.infrastructure.site import Site
    from docshelf.services.result import ServiceResult

CLI_EDITOR = "cli"


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The site is built on first use so ``--help`` and ``--examples`` never
    touch the content tree.
    """

    def __init__(self, settings: DocshelfSettings) -> None:
        self.settings = settings
        self._site: Site | None = None

        from docshelf.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

        if settings.verbose:
            from docshelf.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def site(self) -> Site:
        """The site instance (created lazily on first access)."""
        if self._site is None:
            from docshelf.infrastructure.site import Site

            try:
                self._site = Site(self.settings)
            except ValueError as exc:
                raise click.ClickException(str(exc)) from exc
        return self._site

    @property
    def identity(self) -> EditorIdentity:
        """The CLI operator counts as signed in whenever editing is enabled."""
        return EditorIdentity(name=CLI_EDITOR, authenticated=self.settings.editor.enabled)

    def emit(self, result: ServiceResult) -> None:
        """Print a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr outside JSON mode.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
