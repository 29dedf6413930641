"""Output mode selection for ServiceResult.

The CLI prints a result for humans (Rich renderers), for scripts
(``--quiet``: bare slugs or a status line) or for machines (``--json``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from docshelf.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from docshelf.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format *result* for display.

    JSON wins over quiet, quiet wins over the Rich renderers. Verbose adds
    error detail and the telemetry span tree to Rich output.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
