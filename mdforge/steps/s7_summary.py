"""Step 7 — Summary Reporter.

Purely presentational: prints where everything was installed and the exact
commands a later session or job script needs to use it.
"""

from __future__ import annotations

from typing import Any, ClassVar

from mdforge.console import StatusPrinter
from mdforge.models.config import ProvisioningConfig
from mdforge.models.stages import EngineState
from mdforge.steps.base import BaseStep
from mdforge.steps.s3_environment import module_commands

RULE = "=" * 64


def runtime_exports(config: ProvisioningConfig) -> list[str]:
    """Shell exports that make ``lmp`` and libtorch resolvable at run time."""
    return [
        f"export LAMMPS_PATH={config.lammps_prefix}",
        f"export LIBTORCH_DIR={config.libtorch_dir}",
        "export LD_LIBRARY_PATH=$LIBTORCH_DIR/lib:$FFTW_INSTALL_ROOT/lib:"
        "$CUDA_INSTALL_ROOT/lib64:$LD_LIBRARY_PATH",
        "export PATH=$LAMMPS_PATH/bin:$PATH",
        "export OMP_NUM_THREADS=1",
    ]


def run_command(config: ProvisioningConfig, input_file: str = "input.in") -> str:
    """``srun`` line running LAMMPS with Kokkos on the GPUs."""
    gpus = config.recipe.kokkos_gpus
    return f"srun -n 1 lmp -sf kk -k on g {gpus} -pk kokkos -in {input_file}"


def render_summary(config: ProvisioningConfig) -> str:
    modules = module_commands(config.recipe.toolchain)
    exports = runtime_exports(config)
    lines = [
        "",
        RULE,
        "LAMMPS-KOKKOS-MACE INSTALLATION COMPLETED SUCCESSFULLY!",
        RULE,
        "",
        "Installation Details:",
        f"  Username: {config.username}",
        f"  Project: {config.project}",
        f"  Installation Path: {config.lammps_prefix}",
        f"  Executable: {config.executable}",
        f"  libtorch: {config.libtorch_dir}",
        "",
        "To use LAMMPS-MACE in your job scripts:",
        "  1. Load the required modules:",
        *(f"     {cmd}" for cmd in modules),
        "",
        "  2. Set the paths to LAMMPS and libtorch:",
        *(f"     {line}" for line in exports[:2]),
        "",
        "  3. Make libtorch.so and lmp resolvable:",
        *(f"     {line}" for line in exports[2:]),
        "",
        "  4. Run LAMMPS with Kokkos GPU acceleration:",
        f"     {run_command(config)}",
        "",
        "Important Notes:",
        "  - This build uses PyTorch 2.0.0 with CUDA 11.8 (compatible with CUDA 11.7)",
        "  - NO MKL module is required (workaround applied during build)",
        "  - Run jobs on a GPU partition (Puhti GPUs are NVIDIA V100)",
        "  - `mdforge jobscript` writes a ready-to-submit SLURM script",
        RULE,
    ]
    return "\n".join(lines)


class SummaryStep(BaseStep):
    """Step 7: print the installation summary."""

    state: ClassVar[EngineState] = EngineState.REPORTING
    requires: ClassVar[tuple[str, ...]] = ("config", "printer")

    @property
    def step_id(self) -> str:
        return "summary"

    @property
    def display_name(self) -> str:
        return "Summary Reporter"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        printer: StatusPrinter = run_context["printer"]
        summary = render_summary(run_context["config"])
        run_context["summary"] = summary
        printer.plain(summary)
        return {"summary": summary}
