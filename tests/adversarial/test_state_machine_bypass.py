"""Adversarial tests — pipeline ordering and state machine bypass attempts.

These tests verify that:
1. The engine state never moves backwards or skips ahead
2. Terminal states cannot be exited
3. Steps cannot run before the context they depend on exists
4. A misordered pipeline is rejected rather than half-executed
5. Unexpected exceptions still leave the run terminal
"""

from __future__ import annotations

from typing import Any

import pytest

from mdforge.core.engine import ProvisioningEngine
from mdforge.core.state_machine import EngineStateMachine, InvalidTransitionError
from mdforge.models.stages import PIPELINE_ORDER, EngineState
from mdforge.steps import (
    BuildStep,
    FetchDependenciesStep,
    LoadEnvironmentStep,
    ResolveConfigStep,
    StepRequirementError,
    SummaryStep,
    VerifyInstallationStep,
)


def _advance_to(machine: EngineStateMachine, target: EngineState) -> None:
    for state in PIPELINE_ORDER[1 : PIPELINE_ORDER.index(target) + 1]:
        machine.transition(state)


class TestInvalidTransitionAttempts:
    """Try to make transitions that violate the VALID_TRANSITIONS table."""

    @pytest.fixture
    def machine(self) -> EngineStateMachine:
        return EngineStateMachine()

    def test_cannot_jump_from_start_to_building(self, machine):
        """START -> BUILDING skips resolution, fetching and configuration."""
        with pytest.raises(InvalidTransitionError):
            machine.transition(EngineState.BUILDING)
        assert machine.state == EngineState.START

    def test_cannot_succeed_without_verifying(self, machine):
        _advance_to(machine, EngineState.INSTALLING)
        with pytest.raises(InvalidTransitionError):
            machine.transition(EngineState.SUCCEEDED)

    def test_cannot_move_backwards(self, machine):
        """CONFIGURING_BUILD -> FETCHING_DEPENDENCIES is a backward edge."""
        _advance_to(machine, EngineState.CONFIGURING_BUILD)
        with pytest.raises(InvalidTransitionError):
            machine.transition(EngineState.FETCHING_DEPENDENCIES)
        assert machine.state == EngineState.CONFIGURING_BUILD

    def test_cannot_reenter_current_state(self, machine):
        _advance_to(machine, EngineState.BUILDING)
        with pytest.raises(InvalidTransitionError):
            machine.transition(EngineState.BUILDING)

    def test_cannot_return_to_start(self, machine):
        machine.transition(EngineState.RESOLVING_CONFIG)
        with pytest.raises(InvalidTransitionError):
            machine.transition(EngineState.START)

    @pytest.mark.parametrize("target", list(EngineState))
    def test_cannot_exit_failed(self, machine, target):
        """FAILED is terminal; retrying means a new run."""
        machine.transition(EngineState.FAILED)
        with pytest.raises(InvalidTransitionError):
            machine.transition(target)

    @pytest.mark.parametrize("target", list(EngineState))
    def test_cannot_exit_succeeded(self, machine, target):
        _advance_to(machine, EngineState.SUCCEEDED)
        with pytest.raises(InvalidTransitionError):
            machine.transition(target)

    def test_rejected_transition_leaves_no_history(self, machine):
        machine.transition(EngineState.RESOLVING_CONFIG)
        with pytest.raises(InvalidTransitionError):
            machine.transition(EngineState.VERIFYING)
        assert len(machine.history) == 1


class TestStepRequirementBypass:
    """Steps refuse to run on a context earlier steps never populated."""

    @pytest.mark.parametrize(
        "step_cls",
        [FetchDependenciesStep, LoadEnvironmentStep, BuildStep,
         VerifyInstallationStep, SummaryStep],
    )
    def test_step_without_config(self, step_cls, runner, printer):
        context: dict[str, Any] = {"runner": runner, "printer": printer}
        with pytest.raises(StepRequirementError, match="config"):
            step_cls().run_step(context)
        assert runner.calls == []

    def test_build_without_environment(self, runner, printer, settings):
        context: dict[str, Any] = {
            "settings": settings,
            "runner": runner,
            "printer": printer,
            "inputs": {"identity": "bob", "project": "demo"},
        }
        assert ResolveConfigStep().run_step(context).ok
        with pytest.raises(StepRequirementError, match="environment"):
            BuildStep().run_step(context)
        assert "make" not in runner.programs


class TestMisorderedPipeline:
    """A pipeline whose steps are out of order cannot run past the mistake."""

    def test_build_before_fetch_is_rejected(self, settings, runner, printer):
        steps = [ResolveConfigStep(), BuildStep(), FetchDependenciesStep()]
        engine = ProvisioningEngine(settings, runner=runner, printer=printer, steps=steps)

        with pytest.raises(InvalidTransitionError):
            engine.run("bob", "demo")

        assert engine.machine.state == EngineState.FAILED
        assert runner.calls == []

    def test_step_bug_leaves_run_failed(self, settings, runner, printer):
        class Broken(ResolveConfigStep):
            def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
                raise ValueError("bug")

        engine = ProvisioningEngine(
            settings, runner=runner, printer=printer, steps=[Broken()]
        )
        with pytest.raises(ValueError, match="bug"):
            engine.run("bob", "demo")
        assert engine.machine.state == EngineState.FAILED

    def test_each_run_gets_a_fresh_machine(self, engine, runner):
        runner.fail_on("cmake", 1)
        first = engine.run("bob", "demo")
        assert first.state == EngineState.FAILED

        runner.clear_failures()
        second = engine.run("bob", "demo")
        assert second.succeeded
        assert engine.machine.visited() == PIPELINE_ORDER
