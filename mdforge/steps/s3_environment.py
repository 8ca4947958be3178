"""Step 3 — Environment Loader.

Activates the pinned toolchain through Lmod. ``module`` is a shell function,
so activation runs inside one login shell that purges, loads each component
in turn, and finally dumps its environment with ``env -0``. That environment
is used for every later external invocation.

The script's exit status identifies what failed without reading any output:
``2`` for the purge, ``10 + i`` for component ``i``.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from mdforge.config import EngineSettings
from mdforge.console import StatusPrinter
from mdforge.core.errors import ExternalToolFailure
from mdforge.core.runner import Runner
from mdforge.models.config import ProvisioningConfig
from mdforge.models.stages import EngineState
from mdforge.models.toolchain import ToolchainComponent
from mdforge.steps.base import BaseStep

logger = logging.getLogger(__name__)

PURGE_FAILED = 2
COMPONENT_EXIT_BASE = 10

# Separates anything profile scripts printed from the `env -0` records.
ENV_MARKER = "__MDFORGE_ENV__"


class ActivatedEnvironment(BaseModel):
    """Toolchain image plus the environment it produced."""

    model_config = ConfigDict(frozen=True)

    components: list[ToolchainComponent]
    variables: dict[str, str]


def module_commands(components: Sequence[ToolchainComponent]) -> list[str]:
    """Commands a job script needs to reproduce this toolchain."""
    return [
        "module purge",
        "module load " + " ".join(c.module_id for c in components),
    ]


def activation_script(components: Sequence[ToolchainComponent]) -> str:
    lines = [f"module purge || exit {PURGE_FAILED}"]
    for index, component in enumerate(components):
        lines.append(
            f"module load {shlex.quote(component.module_id)} "
            f"|| exit {COMPONENT_EXIT_BASE + index}"
        )
    lines.append(f"printf '\\0%s\\0' {ENV_MARKER}")
    lines.append("env -0")
    return "\n".join(lines)


def parse_env_dump(dump: str) -> dict[str, str]:
    """Parse NUL-separated ``KEY=value`` records from ``env -0``.

    When the marker is present only the records after it are read, so a
    banner echoed by a login script cannot merge into the first variable.
    """
    _, marker, records = dump.partition(f"\0{ENV_MARKER}\0")
    if marker:
        dump = records
    variables: dict[str, str] = {}
    for record in dump.split("\0"):
        key, sep, value = record.partition("=")
        if sep and key and "\n" not in key:
            variables[key] = value
    return variables


class EnvironmentLoader:
    """Clear-then-load activation of a version-pinned toolchain."""

    def __init__(self, runner: Runner, login_shell: Sequence[str] = ("bash", "-lc")) -> None:
        self._runner = runner
        self._shell = list(login_shell)

    def activate(self, components: Sequence[ToolchainComponent]) -> ActivatedEnvironment:
        """Replace whatever toolchain is active with *components*.

        Raises ``ExternalToolFailure`` naming the purge or the component that
        failed to load. No partial activation is returned.
        """
        status = self._runner.run(
            self._shell[0],
            [*self._shell[1:], activation_script(components)],
            capture=True,
        )
        if not status.ok:
            raise ExternalToolFailure(
                self._describe_failure(status.returncode, components),
                status,
                hint="Run `module spider <name>` to list the versions available.",
            )
        variables = parse_env_dump(status.output)
        logger.debug("activated environment with %d variables", len(variables))
        return ActivatedEnvironment(components=list(components), variables=variables)

    @staticmethod
    def _describe_failure(code: int, components: Sequence[ToolchainComponent]) -> str:
        if code == PURGE_FAILED:
            return "module purge"
        index = code - COMPONENT_EXIT_BASE
        if 0 <= index < len(components):
            return f"Loading module {components[index].module_id}"
        return "Toolchain activation"


class LoadEnvironmentStep(BaseStep):
    """Step 3: activate the build toolchain."""

    state: ClassVar[EngineState] = EngineState.LOADING_ENVIRONMENT
    requires: ClassVar[tuple[str, ...]] = ("config", "settings", "runner", "printer")

    @property
    def step_id(self) -> str:
        return "environment"

    @property
    def display_name(self) -> str:
        return "Environment Loader"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        config: ProvisioningConfig = run_context["config"]
        settings: EngineSettings = run_context["settings"]
        printer: StatusPrinter = run_context["printer"]
        components = config.recipe.toolchain

        printer.info("Loading required modules (no MKL)...")
        loader = EnvironmentLoader(run_context["runner"], settings.login_shell)
        environment = loader.activate(components)
        run_context["environment"] = environment
        printer.success("Modules loaded successfully")

        return {"modules": [c.module_id for c in components]}
