"""``mdforge status USERNAME [PROJECT]`` — show what is already provisioned.

Read-only: evaluates the same presence checks the install pipeline uses to
decide what to skip.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from mdforge.cli.commands._common import fail
from mdforge.config import EngineSettings
from mdforge.console import StatusPrinter
from mdforge.core.errors import ProvisioningError
from mdforge.models.artifacts import is_already_provisioned
from mdforge.steps.s1_resolve import resolve_config
from mdforge.steps.s6_verify import executable_present

console = Console(highlight=False)


def _mark(present: bool) -> str:
    return "[green]yes[/green]" if present else "[yellow]no[/yellow]"


def status_cmd(
    identity: str = typer.Argument(None, metavar="USERNAME", show_default=False),
    project: str = typer.Argument(
        None,
        metavar="PROJECT",
        help="Project name. Falls back to $CSC_PROJECT.",
        show_default=False,
    ),
) -> None:
    """Show which artifacts and binaries are present for a user/project."""
    printer = StatusPrinter(console)
    try:
        config = resolve_config(identity, project, EngineSettings())
    except ProvisioningError as exc:
        raise fail(printer, exc) from exc

    table = Table(title=f"{config.username} / {config.project}")
    table.add_column("Item", style="cyan")
    table.add_column("Path")
    table.add_column("Present", justify="center")

    for artifact in config.artifacts():
        table.add_row(
            artifact.name,
            str(artifact.expected_path),
            _mark(is_already_provisioned(artifact)),
        )
    table.add_row(
        "lmp", str(config.executable), _mark(executable_present(config.executable))
    )
    console.print(table)
