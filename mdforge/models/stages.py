"""Engine state machine models — forward-only transitions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class EngineState(str, Enum):
    """Lifecycle of a single provisioning invocation."""

    START = "start"
    RESOLVING_CONFIG = "resolving_config"
    FETCHING_DEPENDENCIES = "fetching_dependencies"
    LOADING_ENVIRONMENT = "loading_environment"
    CONFIGURING_BUILD = "configuring_build"
    BUILDING = "building"
    INSTALLING = "installing"
    VERIFYING = "verifying"
    REPORTING = "reporting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Forward path through the pipeline; every non-terminal state may also fail.
PIPELINE_ORDER: list[EngineState] = [
    EngineState.START,
    EngineState.RESOLVING_CONFIG,
    EngineState.FETCHING_DEPENDENCIES,
    EngineState.LOADING_ENVIRONMENT,
    EngineState.CONFIGURING_BUILD,
    EngineState.BUILDING,
    EngineState.INSTALLING,
    EngineState.VERIFYING,
    EngineState.REPORTING,
    EngineState.SUCCEEDED,
]

TERMINAL_STATES: frozenset[EngineState] = frozenset(
    {EngineState.SUCCEEDED, EngineState.FAILED}
)


def _build_transitions() -> dict[EngineState, set[EngineState]]:
    table: dict[EngineState, set[EngineState]] = {
        state: set() for state in EngineState
    }
    for current, following in zip(PIPELINE_ORDER, PIPELINE_ORDER[1:]):
        table[current].add(following)
        table[current].add(EngineState.FAILED)
    return table


# Enforced structurally by EngineStateMachine. No edge leads backwards.
VALID_TRANSITIONS: dict[EngineState, set[EngineState]] = _build_transitions()


class StateTransition(BaseModel):
    """One recorded move of the engine state machine."""

    model_config = ConfigDict(frozen=True)

    from_state: EngineState
    to_state: EngineState
    step_id: str | None = None
