"""mdforge data models — Pydantic v2, frozen (immutable)."""

from mdforge.models.process import ExitStatus
from mdforge.models.artifacts import Artifact, ArtifactKind, is_already_provisioned
from mdforge.models.toolchain import PUHTI_GPU_TOOLCHAIN, ToolchainComponent
from mdforge.models.config import BuildRecipe, ProvisioningConfig
from mdforge.models.stages import (
    PIPELINE_ORDER,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    EngineState,
    StateTransition,
)
from mdforge.models.results import (
    FetchOutcome,
    FetchStatus,
    PipelineResult,
    StepOutcome,
)

__all__ = [
    # process
    "ExitStatus",
    # artifacts
    "Artifact",
    "ArtifactKind",
    "is_already_provisioned",
    # toolchain
    "ToolchainComponent",
    "PUHTI_GPU_TOOLCHAIN",
    # config
    "BuildRecipe",
    "ProvisioningConfig",
    # stages
    "EngineState",
    "StateTransition",
    "PIPELINE_ORDER",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    # results
    "FetchStatus",
    "FetchOutcome",
    "StepOutcome",
    "PipelineResult",
]
