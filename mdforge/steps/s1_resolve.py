"""Step 1 — Configuration Resolver.

Derives every path and parameter from the CLI arguments and environment,
then makes sure the install root exists and both roots are writable before
any download or build starts.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, ClassVar

from mdforge.config import EngineSettings
from mdforge.console import StatusPrinter
from mdforge.core.errors import ConfigurationError, InstallPermissionError
from mdforge.models.config import INSTALL_DIR_NAME, BuildRecipe, ProvisioningConfig
from mdforge.models.stages import EngineState
from mdforge.steps.base import BaseStep

logger = logging.getLogger(__name__)

USAGE = "Usage: mdforge install <username> [project_name]"


def resolve_project(project: str | None, settings: EngineSettings) -> str | None:
    """Positional project wins over the ``CSC_PROJECT`` fallback."""
    return project or settings.project or None


def resolve_temp_root(settings: EngineSettings) -> tuple[Path, bool]:
    """Return the staging root and whether the platform default was used."""
    if settings.tmpdir:
        return settings.tmpdir, False
    return settings.default_tmpdir, True


def resolve_config(
    identity: str | None,
    project: str | None,
    settings: EngineSettings,
    *,
    fresh_source: bool = False,
) -> ProvisioningConfig:
    """Build the immutable ProvisioningConfig. Reads only; never writes."""
    if not identity:
        raise ConfigurationError(
            "No username provided!",
            missing="identity",
            hint=(
                f"{USAGE}\n"
                "Example: mdforge install myusername myproject\n"
                "Or set CSC_PROJECT: export CSC_PROJECT=myproject"
            ),
        )

    project_name = resolve_project(project, settings)
    if not project_name:
        raise ConfigurationError(
            "No project name provided!",
            missing="project",
            hint=(
                "Provide the project name as second argument or set CSC_PROJECT.\n"
                f"{USAGE}\n"
                "Or: export CSC_PROJECT=myproject && mdforge install myusername"
            ),
        )

    temp_root, _ = resolve_temp_root(settings)
    recipe = BuildRecipe(
        overlay_presets=[settings.preset_source],
        jobs=settings.jobs,
    )
    return ProvisioningConfig(
        username=identity,
        project=project_name,
        install_root=settings.projappl_root / project_name / identity / INSTALL_DIR_NAME,
        temp_root=temp_root,
        recipe=recipe,
        fresh_source=fresh_source,
    )


def ensure_writable_dir(path: Path, *, create: bool) -> None:
    """Create *path* if asked, then require write access to it."""
    if create:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InstallPermissionError(
                f"Failed to create directory: {path} ({exc.strerror})",
                hint="Please check that you have write permissions to the projappl directory.",
            ) from exc
    if not path.is_dir() or not os.access(path, os.W_OK):
        raise InstallPermissionError(
            f"Directory is not writable: {path}",
            hint="Please check the directory permissions.",
        )


class ResolveConfigStep(BaseStep):
    """Step 1: resolve configuration and prepare the install root."""

    state: ClassVar[EngineState] = EngineState.RESOLVING_CONFIG
    requires: ClassVar[tuple[str, ...]] = ("settings", "printer")

    @property
    def step_id(self) -> str:
        return "resolve"

    @property
    def display_name(self) -> str:
        return "Configuration Resolver"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: EngineSettings = run_context["settings"]
        printer: StatusPrinter = run_context["printer"]
        inputs: dict[str, Any] = run_context.get("inputs", {})

        config = resolve_config(
            inputs.get("identity"),
            inputs.get("project"),
            settings,
            fresh_source=inputs.get("fresh_source", False),
        )
        run_context["config"] = config

        printer.info(
            f"Starting LAMMPS-KOKKOS-MACE installation for user: "
            f"{config.username} (project: {config.project})"
        )
        printer.info(f"Installation will be performed in: {config.install_root}")
        _, defaulted = resolve_temp_root(settings)
        if defaulted:
            printer.warning(f"TMPDIR not set, using {config.temp_root}")
        printer.info(f"Using temporary directory: {config.temp_root}")

        printer.info("Creating base installation directory...")
        ensure_writable_dir(config.install_root, create=True)
        ensure_writable_dir(config.temp_root, create=False)

        return {
            "username": config.username,
            "project": config.project,
            "install_root": str(config.install_root),
            "temp_root": str(config.temp_root),
        }
