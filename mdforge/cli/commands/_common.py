"""Helpers shared by the CLI commands."""

from __future__ import annotations

import typer

from mdforge.console import StatusPrinter
from mdforge.core.errors import ProvisioningError


def report_failure(printer: StatusPrinter, error: ProvisioningError | None) -> None:
    """Print the single categorised error line, then the hint if any."""
    if error is None:
        printer.error("Provisioning failed.")
        return
    printer.error(error.one_line())
    if error.hint:
        printer.plain(error.hint)


def fail(printer: StatusPrinter, error: ProvisioningError) -> typer.Exit:
    report_failure(printer, error)
    return typer.Exit(code=error.exit_code)
