"""Step 2 — Artifact Fetcher.

Ensures each external dependency exists at its expected path:
    - present: skipped, no network or extraction work at all
    - archive: ``wget`` into a staging dir, unpack, delete the archive
    - repository: shallow ``git clone`` of one branch into a staging dir

The staging dir is a hidden sibling of the target. Only once the fetch has
fully succeeded is the result renamed onto the target path, so an
interrupted fetch never leaves behind something that passes the presence
check. Concurrent runs against the same target are not guarded against.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, ClassVar

from mdforge.console import StatusPrinter
from mdforge.core.errors import (
    ExternalToolFailure,
    InstallPermissionError,
    IntegrityError,
    ProvisioningError,
)
from mdforge.core.runner import Runner
from mdforge.models.artifacts import Artifact, ArtifactKind, is_already_provisioned
from mdforge.models.config import ProvisioningConfig
from mdforge.models.results import FetchOutcome, FetchStatus
from mdforge.models.stages import EngineState
from mdforge.steps.base import BaseStep

logger = logging.getLogger(__name__)


def extract_command(archive: Path, destination: Path) -> tuple[str, list[str]]:
    """Pick the unpacker from the archive suffix."""
    if archive.name.endswith(".zip"):
        return "unzip", ["-q", str(archive), "-d", str(destination)]
    return "tar", ["-xf", str(archive), "-C", str(destination)]


def _remove_tree(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise InstallPermissionError(
            f"Failed to remove {path} ({exc.strerror})",
            hint="Please check the directory permissions.",
        ) from exc


class ArtifactFetcher:
    """Fetches artifacts through an external-program runner."""

    def __init__(self, runner: Runner, printer: StatusPrinter | None = None) -> None:
        self._runner = runner
        self._printer = printer or StatusPrinter()

    def ensure(self, artifact: Artifact) -> FetchOutcome:
        """Make *artifact* present. Never raises for categorised failures."""
        try:
            if is_already_provisioned(artifact):
                if not artifact.refresh:
                    self._printer.warning(
                        f"{artifact.name} directory already exists. Skipping download..."
                    )
                    return FetchOutcome(artifact=artifact, status=FetchStatus.SKIPPED)
                self._printer.warning(
                    f"{artifact.name} directory already exists. Removing it..."
                )
                _remove_tree(artifact.expected_path)

            self._reset_staging(artifact)
            if artifact.kind == ArtifactKind.ARCHIVE:
                self._fetch_archive(artifact)
            else:
                self._clone_repository(artifact)
        except ProvisioningError as exc:
            logger.debug("fetch of %s failed, staging left at %s",
                         artifact.name, artifact.staging_path)
            return FetchOutcome(artifact=artifact, status=FetchStatus.FAILED, error=exc)

        return FetchOutcome(artifact=artifact, status=FetchStatus.FETCHED)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def _reset_staging(self, artifact: Artifact) -> None:
        staging = artifact.staging_path
        if staging.exists():
            self._printer.warning(f"Removing incomplete earlier fetch: {staging}")
            _remove_tree(staging)
        try:
            staging.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InstallPermissionError(
                f"Failed to create directory: {staging.parent} ({exc.strerror})",
                hint="Please check the directory permissions.",
            ) from exc

    def _fetch_archive(self, artifact: Artifact) -> None:
        staging = artifact.staging_path
        try:
            staging.mkdir()
        except OSError as exc:
            raise InstallPermissionError(
                f"Failed to create directory: {staging} ({exc.strerror})",
                hint="Please check the directory permissions.",
            ) from exc
        archive = staging / (artifact.archive_name or "")

        self._printer.info(f"Downloading {artifact.name} (this may take a while)...")
        status = self._runner.run(
            "wget", ["-O", str(archive), artifact.locator], cwd=staging
        )
        if not status.ok:
            raise ExternalToolFailure(f"Download of {artifact.name}", status)

        self._printer.info(f"Extracting {artifact.name}...")
        cmd, args = extract_command(archive, staging)
        status = self._runner.run(cmd, args, cwd=staging)
        if not status.ok:
            raise ExternalToolFailure(f"Extraction of {artifact.name}", status)

        try:
            archive.unlink(missing_ok=True)
        except OSError as exc:
            raise InstallPermissionError(
                f"Failed to remove downloaded archive {archive} ({exc.strerror})",
                hint="Please check the directory permissions.",
            ) from exc
        self._promote(staging / artifact.expected_path.name, artifact)
        _remove_tree(staging)

    def _clone_repository(self, artifact: Artifact) -> None:
        staging = artifact.staging_path
        self._printer.info(
            f"Cloning {artifact.name} from {artifact.locator} (branch {artifact.branch})..."
        )
        status = self._runner.run(
            "git",
            [
                "clone",
                f"--branch={artifact.branch}",
                "--depth=1",
                artifact.locator,
                str(staging),
            ],
            cwd=staging.parent,
        )
        if not status.ok:
            raise ExternalToolFailure(f"Clone of {artifact.name}", status)
        self._promote(staging, artifact)

    def _promote(self, fetched: Path, artifact: Artifact) -> None:
        """Rename the completed fetch onto the expected path."""
        if not fetched.exists():
            raise IntegrityError(
                f"{artifact.name}: fetch reported success but {fetched} is missing",
                hint="The archive layout may have changed upstream.",
            )
        try:
            fetched.rename(artifact.expected_path)
        except OSError as exc:
            if artifact.expected_path.exists():
                raise IntegrityError(
                    f"{artifact.name}: {artifact.expected_path} appeared while fetching",
                    hint="Another run may be using the same install root.",
                ) from exc
            raise InstallPermissionError(
                f"Failed to move {fetched} to {artifact.expected_path} ({exc.strerror})",
                hint="Please check the directory permissions.",
            ) from exc
        logger.debug("promoted %s -> %s", fetched, artifact.expected_path)


class FetchDependenciesStep(BaseStep):
    """Step 2: ensure libtorch and the LAMMPS sources are present."""

    state: ClassVar[EngineState] = EngineState.FETCHING_DEPENDENCIES
    requires: ClassVar[tuple[str, ...]] = ("config", "runner", "printer")

    @property
    def step_id(self) -> str:
        return "fetch"

    @property
    def display_name(self) -> str:
        return "Artifact Fetcher"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        config: ProvisioningConfig = run_context["config"]
        printer: StatusPrinter = run_context["printer"]
        fetcher = ArtifactFetcher(run_context["runner"], printer)

        statuses: dict[str, str] = {}
        for artifact in config.artifacts():
            outcome = fetcher.ensure(artifact)
            statuses[artifact.name] = outcome.status.value
            if outcome.error is not None:
                raise outcome.error
            if outcome.status == FetchStatus.FETCHED:
                printer.success(f"{artifact.name} fetched into {artifact.expected_path}")

        return {"artifacts": statuses}
