"""Result types returned by fetches, steps, and whole pipeline runs.

Steps report failure by value: ``StepOutcome.ok`` is checked at the call
site and the engine stops at the first ``False``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from mdforge.core.errors import ProvisioningError
from mdforge.models.artifacts import Artifact
from mdforge.models.config import ProvisioningConfig
from mdforge.models.stages import EngineState


class FetchStatus(str, Enum):
    SKIPPED = "skipped"
    FETCHED = "fetched"
    FAILED = "failed"


class FetchOutcome(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    artifact: Artifact
    status: FetchStatus
    error: ProvisioningError | None = None

    @model_validator(mode="after")
    def _failed_carries_error(self) -> FetchOutcome:
        if (self.status == FetchStatus.FAILED) != (self.error is not None):
            raise ValueError("a failed fetch, and only a failed fetch, carries an error")
        return self

    @property
    def reason(self) -> str:
        return self.error.message if self.error else ""


class StepOutcome(BaseModel):
    """What one pipeline step reported."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    step_id: str
    ok: bool
    error: ProvisioningError | None = None
    details: dict[str, Any] = {}

    @classmethod
    def success(cls, step_id: str, **details: Any) -> StepOutcome:
        return cls(step_id=step_id, ok=True, details=details)

    @classmethod
    def failure(cls, step_id: str, error: ProvisioningError) -> StepOutcome:
        return cls(step_id=step_id, ok=False, error=error)


class PipelineResult(BaseModel):
    """Final report of one engine invocation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    state: EngineState
    outcomes: list[StepOutcome] = []
    config: ProvisioningConfig | None = None
    error: ProvisioningError | None = None
    summary: str = ""

    @property
    def succeeded(self) -> bool:
        return self.state == EngineState.SUCCEEDED

    @property
    def exit_code(self) -> int:
        if self.succeeded:
            return 0
        return self.error.exit_code if self.error else 1

    @property
    def executed_steps(self) -> list[str]:
        return [o.step_id for o in self.outcomes]
