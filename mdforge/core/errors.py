"""Error taxonomy for provisioning failures.

Every failure is fatal to the current invocation. Each class carries the
process exit code the CLI uses and an optional operator hint printed after
the single ``[ERROR]`` line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from mdforge.models.process import ExitStatus


class ProvisioningError(RuntimeError):
    """Base class for all categorised provisioning failures."""

    category: ClassVar[str] = "ProvisioningError"
    exit_code: ClassVar[int] = 1

    def __init__(self, message: str, *, hint: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def one_line(self) -> str:
        return f"{self.category}: {self.message}"


class ConfigurationError(ProvisioningError):
    """A required identity or project parameter is missing or invalid."""

    category = "ConfigurationError"
    exit_code = 1

    def __init__(self, message: str, *, missing: str = "", hint: str = "") -> None:
        super().__init__(message, hint=hint)
        self.missing = missing


class InstallPermissionError(ProvisioningError):
    """A target directory cannot be created or written."""

    category = "PermissionError"
    exit_code = 3


class ExternalToolFailure(ProvisioningError):
    """An invoked external program exited non-zero."""

    category = "ExternalToolFailure"
    exit_code = 4

    def __init__(self, action: str, status: ExitStatus, *, hint: str = "") -> None:
        super().__init__(
            f"{action} failed: `{status.program}` exited with status {status.returncode}",
            hint=hint,
        )
        self.action = action
        self.status = status


class IntegrityError(ProvisioningError):
    """An expected artifact is absent even though its producer reported success."""

    category = "IntegrityError"
    exit_code = 5
