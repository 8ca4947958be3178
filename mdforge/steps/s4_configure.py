"""Step 4 — Build Configurator.

Stages the site preset into the LAMMPS source tree, creates the build and
install directories, and runs CMake exactly once. CMake's diagnostics go
straight to the terminal; only its exit status is inspected.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, ClassVar

from mdforge.console import StatusPrinter
from mdforge.core.errors import (
    ConfigurationError,
    ExternalToolFailure,
    InstallPermissionError,
)
from mdforge.models.config import ProvisioningConfig
from mdforge.models.stages import EngineState
from mdforge.steps.base import BaseStep

logger = logging.getLogger(__name__)


def cmake_definitions(config: ProvisioningConfig) -> dict[str, str]:
    """``-D`` cache entries, in the order they are passed."""
    recipe = config.recipe
    definitions = {
        "CMAKE_INSTALL_PREFIX": str(config.lammps_prefix),
        "CMAKE_PREFIX_PATH": str(config.libtorch_dir),
    }
    definitions.update(recipe.feature_flags)
    # Satisfies libtorch's MKL lookup without an MKL module.
    definitions[recipe.workaround_variable] = str(config.install_root)
    return definitions


def cmake_arguments(config: ProvisioningConfig) -> list[str]:
    """Full CMake argument list for configuring LAMMPS."""
    args = [str(config.source_dir / "cmake")]
    for preset in config.recipe.preset_names:
        args += ["-C", str(config.presets_dir / preset)]
    args += [f"-D{key}={value}" for key, value in cmake_definitions(config).items()]
    return args


def stage_overlay_presets(config: ProvisioningConfig) -> list[Path]:
    """Copy site preset files into ``cmake/presets`` of the source tree."""
    staged: list[Path] = []
    for preset in config.recipe.overlay_presets:
        if not preset.is_file():
            raise ConfigurationError(
                f"CMake preset file not found: {preset}",
                hint="Set MDFORGE_PRESET_SOURCE to a readable preset file.",
            )
        target = config.presets_dir / preset.name
        try:
            config.presets_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(preset, target)
        except OSError as exc:
            raise InstallPermissionError(
                f"Failed to copy {preset.name} preset file ({exc.strerror})",
                hint=f"Please check write permissions on {config.presets_dir}.",
            ) from exc
        staged.append(target)
    return staged


def _make_dir(path: Path, what: str) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise InstallPermissionError(
            f"Failed to create {what}: {path} ({exc.strerror})",
            hint="Please check if you have write permissions to the projappl directory.",
        ) from exc


class ConfigureBuildStep(BaseStep):
    """Step 4: generate the LAMMPS build description with CMake."""

    state: ClassVar[EngineState] = EngineState.CONFIGURING_BUILD
    requires: ClassVar[tuple[str, ...]] = ("config", "environment", "runner", "printer")

    @property
    def step_id(self) -> str:
        return "configure"

    @property
    def display_name(self) -> str:
        return "Build Configurator"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        config: ProvisioningConfig = run_context["config"]
        printer: StatusPrinter = run_context["printer"]
        environment = run_context["environment"]

        printer.info("Copying cmake preset files...")
        staged = stage_overlay_presets(config)
        printer.success("CMake preset files copied successfully")

        _make_dir(config.build_dir, "build directory")
        _make_dir(config.lammps_prefix, "installation directory")
        printer.success(f"Installation directory created: {config.lammps_prefix}")

        printer.info("Configuring CMake build...")
        printer.warning(
            f"Using {config.recipe.workaround_variable} workaround for libtorch "
            "compatibility; MKL is not linked."
        )
        args = cmake_arguments(config)
        status = run_context["runner"].run(
            "cmake", args, cwd=config.build_dir, env=environment.variables or None
        )
        if not status.ok:
            raise ExternalToolFailure(
                "CMake configuration",
                status,
                hint=f"See the CMake output above; the build tree is {config.build_dir}.",
            )
        printer.success("CMake configuration completed successfully")

        return {"presets": [str(p) for p in staged], "cmake_args": args}
