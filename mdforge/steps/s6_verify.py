"""Step 6: Installation Verifier."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar

from mdforge.console import StatusPrinter
from mdforge.core.errors import IntegrityError
from mdforge.models.config import ProvisioningConfig
from mdforge.models.stages import EngineState
from mdforge.steps.base import BaseStep


def executable_present(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def verify_installation(config: ProvisioningConfig) -> Path:
    """Return the executable path, or raise ``IntegrityError``.

    Reaching this point means every build tool reported success, so a
    missing executable is a silent upstream failure.
    """
    executable = config.executable
    if not executable_present(executable):
        raise IntegrityError(
            f"LAMMPS executable not found at {executable} although build and "
            "install reported success",
            hint=f"Inspect the install manifest in {config.build_dir}.",
        )
    return executable


class VerifyInstallationStep(BaseStep):
    """Step 6: check that ``bin/lmp`` exists and is executable."""

    state: ClassVar[EngineState] = EngineState.VERIFYING
    requires: ClassVar[tuple[str, ...]] = ("config", "printer")

    @property
    def step_id(self) -> str:
        return "verify"

    @property
    def display_name(self) -> str:
        return "Installation Verifier"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        printer: StatusPrinter = run_context["printer"]
        printer.info("Verifying installation...")
        executable = verify_installation(run_context["config"])
        printer.success(f"LAMMPS executable found at: {executable}")
        return {"executable": str(executable)}
