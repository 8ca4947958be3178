"""``mdforge jobscript USERNAME [PROJECT] --input FILE`` — write a SLURM script."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from mdforge.cli.commands._common import fail
from mdforge.config import EngineSettings
from mdforge.console import StatusPrinter
from mdforge.core.errors import InstallPermissionError, ProvisioningError
from mdforge.jobscript import JobSpec, render_job_script
from mdforge.steps.s1_resolve import resolve_config

console = Console(highlight=False)


def jobscript_cmd(
    identity: str = typer.Argument(None, metavar="USERNAME", show_default=False),
    project: str = typer.Argument(
        None,
        metavar="PROJECT",
        help="Project name. Falls back to $CSC_PROJECT.",
        show_default=False,
    ),
    input_file: str = typer.Option(
        ..., "--input", "-i", help="LAMMPS input script passed to -in."
    ),
    account: str = typer.Option(
        None, "--account", help="Billing account (default: the project)."
    ),
    partition: str = typer.Option("gputest", "--partition", "-p"),
    time: str = typer.Option("00:15:00", "--time", "-t"),
    gpus: int = typer.Option(1, "--gpus", min=1, help="GPUs per node."),
    job_name: str = typer.Option("lammps-gpu", "--job-name"),
    output: Path = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout."
    ),
) -> None:
    """Render a SLURM batch script that runs the installed LAMMPS."""
    printer = StatusPrinter(console)
    try:
        config = resolve_config(identity, project, EngineSettings())
    except ProvisioningError as exc:
        raise fail(printer, exc) from exc

    job = JobSpec(
        account=account or config.project,
        input_file=input_file,
        partition=partition,
        time=time,
        gpus=gpus,
        job_name=job_name,
    )
    script = render_job_script(config, job)

    if output is None:
        printer.plain(script)
        return
    try:
        output.write_text(script, encoding="utf-8")
        output.chmod(0o755)
    except OSError as exc:
        error = InstallPermissionError(
            f"Failed to write job script {output} ({exc.strerror})",
            hint="Check that the directory exists and is writable.",
        )
        raise fail(printer, error) from exc
    printer.success(f"Job script written to {output}")
