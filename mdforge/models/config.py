"""Provisioning and build recipe configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from mdforge.models.artifacts import Artifact, ArtifactKind
from mdforge.models.toolchain import PUHTI_GPU_TOOLCHAIN, ToolchainComponent

INSTALL_DIR_NAME = "LAMMPS-KOKKOS"
LAMMPS_PREFIX_NAME = "lammps-kokkos-mace"
EXECUTABLE_RELPATH = Path("bin") / "lmp"


class BuildRecipe(BaseModel):
    """Every fixed input of a LAMMPS-KOKKOS-MACE build.

    ``workaround_variable`` is pointed at the install root instead of a real
    MKL include directory so that libtorch's CMake config is satisfied
    without loading an MKL module.
    """

    model_config = ConfigDict(frozen=True)

    libtorch_url: str = (
        "https://download.pytorch.org/libtorch/cu118/"
        "libtorch-cxx11-abi-shared-with-deps-2.0.0%2Bcu118.zip"
    )
    libtorch_archive: str = "libtorch-cxx11-abi-shared-with-deps-2.0.0+cu118.zip"
    lammps_repository: str = "https://github.com/ACEsuit/lammps"
    lammps_branch: str = "mace"

    toolchain: list[ToolchainComponent] = Field(
        default_factory=lambda: list(PUHTI_GPU_TOOLCHAIN)
    )

    base_presets: list[str] = ["basic.cmake"]
    overlay_presets: list[Path] = [
        Path("/appl/soft/chem/lammps/custom/puhti-gpu.cmake")
    ]
    feature_flags: dict[str, str] = {"PKG_ML-MACE": "ON"}
    workaround_variable: str = "MKL_INCLUDE_DIR"

    jobs: int = Field(default=8, ge=1)
    kokkos_gpus: int = Field(default=4, ge=1)

    @property
    def preset_names(self) -> list[str]:
        """Preset file names in layering order; later ones take precedence."""
        return [*self.base_presets, *(p.name for p in self.overlay_presets)]


class ProvisioningConfig(BaseModel):
    """Resolved once at startup; every step reads its paths from here."""

    model_config = ConfigDict(frozen=True)

    username: str
    project: str
    install_root: Path
    temp_root: Path
    recipe: BuildRecipe = BuildRecipe()
    fresh_source: bool = False

    @property
    def libtorch_dir(self) -> Path:
        return self.install_root / "libtorch"

    @property
    def lammps_prefix(self) -> Path:
        return self.install_root / LAMMPS_PREFIX_NAME

    @property
    def executable(self) -> Path:
        return self.lammps_prefix / EXECUTABLE_RELPATH

    @property
    def source_dir(self) -> Path:
        return self.temp_root / "lammps"

    @property
    def build_dir(self) -> Path:
        return self.source_dir / "build"

    @property
    def presets_dir(self) -> Path:
        return self.source_dir / "cmake" / "presets"

    def artifacts(self) -> list[Artifact]:
        """External dependencies in fetch order."""
        return [
            Artifact(
                name="libtorch",
                kind=ArtifactKind.ARCHIVE,
                locator=self.recipe.libtorch_url,
                archive_name=self.recipe.libtorch_archive,
                expected_path=self.libtorch_dir,
            ),
            Artifact(
                name="lammps",
                kind=ArtifactKind.REPOSITORY,
                locator=self.recipe.lammps_repository,
                branch=self.recipe.lammps_branch,
                expected_path=self.source_dir,
                refresh=self.fresh_source,
            ),
        ]
