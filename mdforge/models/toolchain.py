"""Toolchain components activated through the cluster's module system."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ToolchainComponent(BaseModel):
    """A version-pinned module, e.g. ``gcc/11.3.0``."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str

    @property
    def module_id(self) -> str:
        return f"{self.name}/{self.version}"


# Puhti GPU toolchain. MKL is deliberately absent (see BuildRecipe).
PUHTI_GPU_TOOLCHAIN: list[ToolchainComponent] = [
    ToolchainComponent(name="gcc", version="11.3.0"),
    ToolchainComponent(name="openmpi", version="4.1.4-cuda"),
    ToolchainComponent(name="fftw", version="3.3.10-mpi"),
    ToolchainComponent(name="cuda", version="11.7.0"),
]
