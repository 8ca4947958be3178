"""Step 5 — Build Executor.

``make -j N`` followed by ``make install``, as separate invocations. The
engine moves from BUILDING to INSTALLING between the two. Build products
are kept on failure so the next run can resume the build.
"""

from __future__ import annotations

from typing import Any, ClassVar

from mdforge.console import StatusPrinter
from mdforge.core.errors import ExternalToolFailure
from mdforge.core.state_machine import EngineStateMachine
from mdforge.models.config import ProvisioningConfig
from mdforge.models.stages import EngineState
from mdforge.steps.base import BaseStep


class BuildStep(BaseStep):
    """Step 5: compile and install LAMMPS."""

    state: ClassVar[EngineState] = EngineState.BUILDING
    requires: ClassVar[tuple[str, ...]] = ("config", "environment", "runner", "printer")

    @property
    def step_id(self) -> str:
        return "build"

    @property
    def display_name(self) -> str:
        return "Build Executor"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        config: ProvisioningConfig = run_context["config"]
        printer: StatusPrinter = run_context["printer"]
        machine: EngineStateMachine | None = run_context.get("machine")
        runner = run_context["runner"]
        env = run_context["environment"].variables or None
        jobs = config.recipe.jobs

        printer.info(f"Building LAMMPS with {jobs} jobs (this may take a while)...")
        status = runner.run("make", ["-j", str(jobs)], cwd=config.build_dir, env=env)
        if not status.ok:
            raise ExternalToolFailure(
                "LAMMPS build",
                status,
                hint=f"Build products are kept in {config.build_dir}.",
            )
        printer.success("LAMMPS built successfully")

        if machine is not None:
            machine.transition(EngineState.INSTALLING, step_id=self.step_id)

        printer.info("Installing LAMMPS...")
        status = runner.run("make", ["install"], cwd=config.build_dir, env=env)
        if not status.ok:
            raise ExternalToolFailure("LAMMPS installation", status)
        printer.success("LAMMPS installed successfully")

        return {"jobs": jobs, "prefix": str(config.lammps_prefix)}
