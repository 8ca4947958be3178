"""``mdforge install USERNAME [PROJECT]`` — run the provisioning pipeline.

Fetches libtorch and the LAMMPS sources, loads the toolchain, configures,
builds, installs, verifies ``bin/lmp`` and prints the usage summary. Safe to
re-run: completed downloads are skipped.
"""

from __future__ import annotations

import typer
from rich.console import Console

from mdforge.cli.commands._common import report_failure
from mdforge.config import EngineSettings
from mdforge.console import StatusPrinter, configure_logging
from mdforge.core.engine import ProvisioningEngine

console = Console(highlight=False)

# Shell convention: 128 + SIGINT.
INTERRUPTED = 130


def install_cmd(
    identity: str = typer.Argument(
        None,
        metavar="USERNAME",
        help="Cluster username; part of the install path.",
        show_default=False,
    ),
    project: str = typer.Argument(
        None,
        metavar="PROJECT",
        help="Project name. Falls back to $CSC_PROJECT.",
        show_default=False,
    ),
    fresh_source: bool = typer.Option(
        False,
        "--fresh-source",
        help="Remove and re-clone the LAMMPS sources even if present.",
    ),
    jobs: int = typer.Option(
        None,
        "--jobs",
        "-j",
        min=1,
        help="Parallel compile jobs (default: $MDFORGE_JOBS or 8).",
        show_default=False,
    ),
) -> None:
    """Install LAMMPS with Kokkos GPU acceleration and ML-MACE."""
    settings = EngineSettings(jobs=jobs) if jobs else EngineSettings()
    configure_logging(settings.log_level, Console(stderr=True))
    printer = StatusPrinter(console)

    engine = ProvisioningEngine(settings, printer=printer)
    try:
        result = engine.run(identity, project, fresh_source=fresh_source)
    except KeyboardInterrupt:
        printer.error("Interrupted")
        raise typer.Exit(code=INTERRUPTED) from None

    if not result.succeeded:
        report_failure(printer, result.error)
        raise typer.Exit(code=result.exit_code)
