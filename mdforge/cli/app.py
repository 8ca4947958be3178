"""Main Typer application — imports and registers all CLI commands.

Entry point: ``mdforge`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import typer

from mdforge.cli.commands.install import install_cmd
from mdforge.cli.commands.jobscript import jobscript_cmd
from mdforge.cli.commands.status import status_cmd

app = typer.Typer(
    name="mdforge",
    help="mdforge: idempotent LAMMPS + Kokkos + MACE provisioning.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="install", help="Fetch, build, install and verify LAMMPS.")(install_cmd)
app.command(name="status", help="Show which artifacts are already provisioned.")(status_cmd)
app.command(name="jobscript", help="Write a SLURM script for the installation.")(jobscript_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
