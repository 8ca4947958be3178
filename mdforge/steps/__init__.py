"""Provisioning steps — registry mapping step_id to step class.

Usage::

    from mdforge.steps import STEP_REGISTRY, default_steps

    for step in default_steps():
        outcome = step.run_step(run_context)
        if not outcome.ok:
            break
"""

from __future__ import annotations

from mdforge.steps.base import BaseStep, StepRequirementError
from mdforge.steps.s1_resolve import ResolveConfigStep
from mdforge.steps.s2_fetch import ArtifactFetcher, FetchDependenciesStep
from mdforge.steps.s3_environment import EnvironmentLoader, LoadEnvironmentStep
from mdforge.steps.s4_configure import ConfigureBuildStep
from mdforge.steps.s5_build import BuildStep
from mdforge.steps.s6_verify import VerifyInstallationStep
from mdforge.steps.s7_summary import SummaryStep

STEP_REGISTRY: dict[str, type[BaseStep]] = {
    "resolve": ResolveConfigStep,
    "fetch": FetchDependenciesStep,
    "environment": LoadEnvironmentStep,
    "configure": ConfigureBuildStep,
    "build": BuildStep,
    "verify": VerifyInstallationStep,
    "summary": SummaryStep,
}

# Execution order; each step only reads what earlier ones produced.
STEP_ORDER: list[str] = [
    "resolve",
    "fetch",
    "environment",
    "configure",
    "build",
    "verify",
    "summary",
]


def default_steps() -> list[BaseStep]:
    """Instantiate the full pipeline in execution order."""
    return [STEP_REGISTRY[step_id]() for step_id in STEP_ORDER]


__all__ = [
    "BaseStep",
    "StepRequirementError",
    "STEP_REGISTRY",
    "STEP_ORDER",
    "default_steps",
    "ResolveConfigStep",
    "FetchDependenciesStep",
    "LoadEnvironmentStep",
    "ConfigureBuildStep",
    "BuildStep",
    "VerifyInstallationStep",
    "SummaryStep",
    "ArtifactFetcher",
    "EnvironmentLoader",
]
