"""mdforge CLI — Typer-based command-line interface.

Provides the ``mdforge`` command with subcommands for installing LAMMPS,
checking what is already provisioned, and writing SLURM job scripts.

All output uses Rich for formatted terminal display.
"""
