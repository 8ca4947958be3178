"""mdforge: idempotent provisioning engine for GPU LAMMPS builds.

Installs LAMMPS (ACEsuit ``mace`` branch) with Kokkos GPU acceleration and
the ML-MACE pair style against libtorch on the CSC Puhti cluster:
  - fetch libtorch and the LAMMPS sources, skipping what is already present
  - activate a version-pinned Lmod toolchain (no MKL)
  - configure with CMake presets, build, install, and verify ``bin/lmp``
  - print the exact commands a job script needs to use the installation
"""

__version__ = "0.2.0"
__description__ = "Idempotent LAMMPS + Kokkos + MACE provisioning for HPC clusters"

from mdforge.core.engine import ProvisioningEngine
from mdforge.cli.app import app as cli

__all__ = ["ProvisioningEngine", "cli", "__version__"]
