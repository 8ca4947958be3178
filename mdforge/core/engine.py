"""Provisioning engine — the sequential, fail-fast pipeline runner.

Wires settings, the external-program runner, the status printer, and the
state machine into one run context, then drives the steps in order. Each
step's ``StepOutcome`` is checked before the next step starts; the first
failure ends the run. There is no retry edge: re-running the engine is the
retry, and each step's own idempotence check skips completed work.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from mdforge.config import EngineSettings
from mdforge.console import StatusPrinter
from mdforge.core.runner import Runner, SubprocessRunner
from mdforge.core.state_machine import EngineStateMachine
from mdforge.models.results import PipelineResult, StepOutcome
from mdforge.models.stages import EngineState
from mdforge.steps import BaseStep, default_steps

logger = logging.getLogger(__name__)


class ProvisioningEngine:
    """Runs the provisioning pipeline once per ``run()`` call.

    Parameters
    ----------
    settings:
        Engine settings. Read from the environment if not provided.
    runner:
        Executes external programs. A subprocess runner by default.
    printer:
        Destination for ``[INFO]``-style status lines.
    steps:
        Pipeline steps in order. The full default pipeline if not provided.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        runner: Runner | None = None,
        printer: StatusPrinter | None = None,
        steps: Sequence[BaseStep] | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.runner: Runner = runner or SubprocessRunner()
        self.printer = printer or StatusPrinter()
        self.steps: list[BaseStep] = list(steps) if steps is not None else default_steps()
        self.machine = EngineStateMachine()

    def run(
        self,
        identity: str | None,
        project: str | None = None,
        *,
        fresh_source: bool = False,
    ) -> PipelineResult:
        """Execute every step in order, stopping at the first failure."""
        self.machine = EngineStateMachine()
        run_context: dict[str, Any] = {
            "settings": self.settings,
            "runner": self.runner,
            "printer": self.printer,
            "machine": self.machine,
            "inputs": {
                "identity": identity,
                "project": project,
                "fresh_source": fresh_source,
            },
        }
        outcomes: list[StepOutcome] = []

        try:
            for step in self.steps:
                self.machine.transition(step.state, step_id=step.step_id)
                outcome = step.run_step(run_context)
                outcomes.append(outcome)
                if not outcome.ok:
                    self.machine.fail(step_id=step.step_id)
                    logger.info("pipeline aborted at %s", step.step_id)
                    return self._result(run_context, outcomes, outcome)
            self.machine.transition(EngineState.SUCCEEDED)
        except BaseException:
            # Interrupts and bugs still leave the machine terminal.
            self.machine.fail()
            raise

        return self._result(run_context, outcomes, None)

    def _result(
        self,
        run_context: dict[str, Any],
        outcomes: list[StepOutcome],
        failed: StepOutcome | None,
    ) -> PipelineResult:
        return PipelineResult(
            state=self.machine.state,
            outcomes=outcomes,
            config=run_context.get("config"),
            error=failed.error if failed else None,
            summary=run_context.get("summary", ""),
        )
