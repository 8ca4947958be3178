"""Abstract base step with an enforced lifecycle.

Every concrete step inherits from BaseStep and implements only ``execute()``.
The ``run_step()`` wrapper is **not overridable** and always runs in this order:

    check_requirements -> execute -> record

Categorised failures raised by ``execute()`` (any ``ProvisioningError``) come
back as a failed ``StepOutcome``. The caller checks ``outcome.ok`` and stops
on the first failure. Anything else is a bug and propagates unchanged.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, ClassVar, final

from mdforge.core.errors import ProvisioningError
from mdforge.models.results import StepOutcome
from mdforge.models.stages import EngineState

logger = logging.getLogger(__name__)


class StepRequirementError(RuntimeError):
    """Raised when a step runs before the context keys it reads exist."""


class BaseStep(abc.ABC):
    """Abstract base for all provisioning steps.

    Subclasses **must** implement:
        * ``step_id``       — unique identifier (e.g. ``"fetch"``).
        * ``display_name``  — human-readable name.
        * ``execute(run_context)`` — the side-effecting action.

    Subclasses **may** set:
        * ``state``    — engine state entered while the step runs.
        * ``requires`` — ``run_context`` keys produced by earlier steps.
    """

    state: ClassVar[EngineState]
    requires: ClassVar[tuple[str, ...]] = ()

    @property
    @abc.abstractmethod
    def step_id(self) -> str: ...

    @property
    @abc.abstractmethod
    def display_name(self) -> str: ...

    @abc.abstractmethod
    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Perform the step.

        Parameters
        ----------
        run_context:
            Mutable dict carrying run-wide state: ``settings``, ``runner``,
            ``printer``, ``machine``, ``inputs`` and whatever earlier steps
            stored (``config``, ``environment``).

        Returns
        -------
        dict:
            Details kept in ``StepOutcome.details``.

        Raises
        ------
        ProvisioningError:
            On any categorised failure.
        """
        ...

    @final
    def run_step(self, run_context: dict[str, Any]) -> StepOutcome:
        """Run the full step lifecycle.  **Do not override.**"""
        self.check_requirements(run_context)
        logger.info("%s [%s] started", self.display_name, self.step_id)

        try:
            details = self.execute(run_context)
        except ProvisioningError as exc:
            logger.info(
                "%s [%s] failed: %s", self.display_name, self.step_id, exc.one_line()
            )
            return StepOutcome.failure(self.step_id, exc)

        run_context.setdefault("step_results", {})[self.step_id] = details
        logger.info("%s [%s] done", self.display_name, self.step_id)
        return StepOutcome.success(self.step_id, **details)

    @final
    def check_requirements(self, run_context: dict[str, Any]) -> None:
        missing = [key for key in self.requires if run_context.get(key) is None]
        if missing:
            raise StepRequirementError(
                f"Cannot run {self.step_id}: run context lacks {', '.join(missing)}"
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} step_id={self.step_id!r}>"
