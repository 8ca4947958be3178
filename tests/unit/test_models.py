"""Tests for the frozen data models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from mdforge.core.errors import ExternalToolFailure, IntegrityError
from mdforge.models import (
    Artifact,
    ArtifactKind,
    BuildRecipe,
    EngineState,
    ExitStatus,
    FetchOutcome,
    FetchStatus,
    PipelineResult,
    ProvisioningConfig,
    StepOutcome,
    ToolchainComponent,
    is_already_provisioned,
)


def _config(tmp_path: Path, **overrides) -> ProvisioningConfig:
    values = {
        "username": "alice",
        "project": "proj1",
        "install_root": tmp_path / "projappl" / "proj1" / "alice" / "LAMMPS-KOKKOS",
        "temp_root": tmp_path / "scratch",
    }
    values.update(overrides)
    return ProvisioningConfig(**values)


class TestToolchainComponent:
    def test_module_id(self):
        assert ToolchainComponent(name="gcc", version="11.3.0").module_id == "gcc/11.3.0"

    def test_default_toolchain_has_no_mkl(self):
        names = [c.name for c in BuildRecipe().toolchain]
        assert names == ["gcc", "openmpi", "fftw", "cuda"]
        assert "mkl" not in names


class TestArtifact:
    def test_archive_requires_archive_name(self, tmp_path: Path):
        with pytest.raises(ValidationError):
            Artifact(
                name="libtorch",
                kind=ArtifactKind.ARCHIVE,
                locator="https://example.org/libtorch.zip",
                expected_path=tmp_path / "libtorch",
            )

    def test_repository_requires_branch(self, tmp_path: Path):
        with pytest.raises(ValidationError):
            Artifact(
                name="lammps",
                kind=ArtifactKind.REPOSITORY,
                locator="https://github.com/ACEsuit/lammps",
                expected_path=tmp_path / "lammps",
            )

    def test_staging_path_is_hidden_sibling(self, tmp_path: Path):
        artifact = Artifact(
            name="lammps",
            kind=ArtifactKind.REPOSITORY,
            locator="https://github.com/ACEsuit/lammps",
            branch="mace",
            expected_path=tmp_path / "lammps",
        )
        assert artifact.staging_path == tmp_path / ".lammps.partial"

    def test_presence_predicate(self, tmp_path: Path):
        artifact = Artifact(
            name="lammps",
            kind=ArtifactKind.REPOSITORY,
            locator="https://github.com/ACEsuit/lammps",
            branch="mace",
            expected_path=tmp_path / "lammps",
        )
        assert is_already_provisioned(artifact) is False
        (tmp_path / "lammps").mkdir()
        assert is_already_provisioned(artifact) is True

    def test_frozen(self, tmp_path: Path):
        artifact = _config(tmp_path).artifacts()[0]
        with pytest.raises(ValidationError):
            artifact.name = "other"


class TestProvisioningConfig:
    def test_derived_paths(self, tmp_path: Path):
        config = _config(tmp_path)
        root = config.install_root
        assert config.libtorch_dir == root / "libtorch"
        assert config.lammps_prefix == root / "lammps-kokkos-mace"
        assert config.executable == root / "lammps-kokkos-mace" / "bin" / "lmp"
        assert config.source_dir == tmp_path / "scratch" / "lammps"
        assert config.build_dir == tmp_path / "scratch" / "lammps" / "build"
        assert config.presets_dir == tmp_path / "scratch" / "lammps" / "cmake" / "presets"

    def test_artifacts_in_fetch_order(self, tmp_path: Path):
        libtorch, lammps = _config(tmp_path).artifacts()
        assert libtorch.kind == ArtifactKind.ARCHIVE
        assert libtorch.archive_name.endswith(".zip")
        assert lammps.kind == ArtifactKind.REPOSITORY
        assert lammps.branch == "mace"
        assert lammps.refresh is False

    def test_fresh_source_marks_repository_for_refresh(self, tmp_path: Path):
        libtorch, lammps = _config(tmp_path, fresh_source=True).artifacts()
        assert lammps.refresh is True
        assert libtorch.refresh is False

    def test_preset_layering_order(self):
        recipe = BuildRecipe()
        assert recipe.preset_names == ["basic.cmake", "puhti-gpu.cmake"]


class TestResults:
    def test_exit_status_ok(self):
        assert ExitStatus(command=("true",), returncode=0).ok is True
        assert ExitStatus(command=("false",), returncode=1).ok is False

    def test_exit_status_render_quotes(self):
        status = ExitStatus(command=("echo", "a b"), returncode=0)
        assert status.render() == "echo 'a b'"

    def test_pipeline_result_exit_codes(self):
        assert PipelineResult(state=EngineState.SUCCEEDED).exit_code == 0
        failure = ExternalToolFailure(
            "LAMMPS build", ExitStatus(command=("make",), returncode=2)
        )
        result = PipelineResult(state=EngineState.FAILED, error=failure)
        assert result.exit_code == 4
        assert PipelineResult(state=EngineState.FAILED).exit_code == 1

    def test_step_outcome_constructors(self):
        ok = StepOutcome.success("verify", executable="/x/bin/lmp")
        assert ok.ok and ok.details == {"executable": "/x/bin/lmp"}
        err = IntegrityError("missing")
        bad = StepOutcome.failure("verify", err)
        assert not bad.ok and bad.error is err

    def test_failed_fetch_requires_error(self, tmp_path: Path):
        libtorch = _config(tmp_path).artifacts()[0]
        with pytest.raises(ValidationError):
            FetchOutcome(artifact=libtorch, status=FetchStatus.FAILED)
        with pytest.raises(ValidationError):
            FetchOutcome(
                artifact=libtorch,
                status=FetchStatus.FETCHED,
                error=IntegrityError("stray"),
            )
        failed = FetchOutcome(
            artifact=libtorch, status=FetchStatus.FAILED, error=IntegrityError("gone")
        )
        assert failed.reason == "gone"
