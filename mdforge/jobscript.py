"""SLURM batch scripts for running the installed LAMMPS on GPU nodes.

The script reaches the installation only through ``LAMMPS_DIR`` and
``LIBTORCH_DIR``, which are set from a ProvisioningConfig.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from mdforge.models.config import ProvisioningConfig
from mdforge.steps.s3_environment import module_commands


class JobSpec(BaseModel):
    """Scheduler directives and run options for one GPU job."""

    model_config = ConfigDict(frozen=True)

    account: str
    input_file: str
    job_name: str = "lammps-gpu"
    partition: str = "gputest"
    time: str = "00:15:00"
    nodes: int = Field(default=1, ge=1)
    ntasks: int = Field(default=1, ge=1)
    mem_per_cpu: str = "9G"
    gpu_type: str = "v100"
    gpus: int = Field(default=1, ge=1)
    kokkos_package_args: str = "newton on neigh half"


def render_job_script(config: ProvisioningConfig, job: JobSpec) -> str:
    directives = [
        f"--account={job.account}",
        f"--partition={job.partition}",
        f"--time={job.time}",
        f"--nodes={job.nodes}",
        f"--ntasks={job.ntasks}",
        f"--mem-per-cpu={job.mem_per_cpu}",
        f"--gres=gpu:{job.gpu_type}:{job.gpus}",
        f"--output={job.job_name}_%j.out",
        f"--error={job.job_name}_%j.err",
    ]
    lmp = (
        f"srun -n {job.ntasks} lmp -sf kk -k on g {job.gpus} "
        f"-pk kokkos {job.kokkos_package_args} -in {job.input_file}"
    )
    lines = [
        "#!/bin/bash",
        f"#SBATCH --job-name={job.job_name}",
        *(f"#SBATCH {d}" for d in directives),
        "",
        *module_commands(config.recipe.toolchain),
        "",
        "# Installation directories of LAMMPS and libtorch",
        f"LAMMPS_DIR={config.lammps_prefix}",
        f"LIBTORCH_DIR={config.libtorch_dir}",
        "",
        "# libtorch.so must be resolvable at run time",
        "export LD_LIBRARY_PATH=$LIBTORCH_DIR/lib:$FFTW_INSTALL_ROOT/lib:"
        "$CUDA_INSTALL_ROOT/lib64:$LD_LIBRARY_PATH",
        "export PATH=$LAMMPS_DIR/bin:$PATH",
        "export OMP_NUM_THREADS=1",
        "",
        lmp,
        "",
    ]
    return "\n".join(lines)
