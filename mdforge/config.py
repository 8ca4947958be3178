"""Engine settings — env-driven via pydantic-settings.

Reads from a ``.env`` file and ``MDFORGE_*`` environment variables. Two
cluster-wide variables are honoured under their own names: ``CSC_PROJECT``
as the project fallback and ``TMPDIR`` as the staging directory.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Runtime settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CSC_PROJECT=project_2001234
        export MDFORGE_JOBS=16
        export MDFORGE_LOG_LEVEL=DEBUG

    Or via .env file::

        MDFORGE_PROJAPPL_ROOT=/projappl
        MDFORGE_TMPDIR=/scratch/project_2001234/tmp
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MDFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = "WARNING"

    # Identity fallback
    project: str | None = Field(
        default=None,
        validation_alias=AliasChoices("MDFORGE_PROJECT", "CSC_PROJECT"),
    )

    # Filesystem layout
    projappl_root: Path = Path("/projappl")
    tmpdir: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("MDFORGE_TMPDIR", "TMPDIR"),
    )
    default_tmpdir: Path = Path("/tmp")

    # Build
    jobs: int = Field(default=8, ge=1)
    preset_source: Path = Path("/appl/soft/chem/lammps/custom/puhti-gpu.cmake")

    # Lmod's `module` is a shell function, only defined in a login shell
    login_shell: list[str] = ["bash", "-lc"]
