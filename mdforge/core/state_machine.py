"""Forward-only engine state machine.

Enforces:
- Valid transitions only (VALID_TRANSITIONS table)
- No edge back to an earlier state; retrying means a new invocation
- Terminal states (SUCCEEDED, FAILED) have no outgoing transitions
- Every transition recorded in order for the run summary and tests
"""

from __future__ import annotations

import logging

from mdforge.models.stages import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    EngineState,
    StateTransition,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class EngineStateMachine:
    """Tracks the state of one provisioning invocation."""

    def __init__(self) -> None:
        self._state = EngineState.START
        self._history: list[StateTransition] = []

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def history(self) -> list[StateTransition]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def transition(
        self, target: EngineState, *, step_id: str | None = None
    ) -> StateTransition:
        """Move to *target*, or raise ``InvalidTransitionError``."""
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self._state.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        record = StateTransition(
            from_state=self._state, to_state=target, step_id=step_id
        )
        self._history.append(record)
        logger.debug("state %s -> %s", self._state.value, target.value)
        self._state = target
        return record

    def fail(self, *, step_id: str | None = None) -> StateTransition | None:
        """Move to FAILED unless already terminal."""
        if self.is_terminal:
            return None
        return self.transition(EngineState.FAILED, step_id=step_id)

    def visited(self) -> list[EngineState]:
        """States entered so far, starting with START."""
        return [EngineState.START, *(t.to_state for t in self._history)]
