"""Thin wrapper around external program invocation.

The engine never inspects tool output to decide what happens next; it only
looks at ``ExitStatus.returncode``. Diagnostics stream straight to the
operator's terminal unless the caller asks for stdout to be captured.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from mdforge.models.process import ExitStatus

logger = logging.getLogger(__name__)

# Shell convention for "command not found".
COMMAND_NOT_FOUND = 127


class Runner(Protocol):
    """Anything that can run a command and report its exit status."""

    def run(
        self,
        cmd: str,
        args: Sequence[str] = (),
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> ExitStatus: ...


class SubprocessRunner:
    """Runs commands with :func:`subprocess.run`, blocking until exit.

    No timeout is applied. A ``KeyboardInterrupt`` while waiting is left to
    propagate to the engine.
    """

    def run(
        self,
        cmd: str,
        args: Sequence[str] = (),
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> ExitStatus:
        command = (cmd, *(str(a) for a in args))
        logger.debug("exec %s (cwd=%s)", " ".join(command), cwd)
        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE if capture else None,
                text=True if capture else None,
                check=False,
            )
        except FileNotFoundError:
            logger.error("%s: command not found", cmd)
            return ExitStatus(command=command, returncode=COMMAND_NOT_FOUND)

        output = completed.stdout if capture and completed.stdout else ""
        status = ExitStatus(
            command=command, returncode=completed.returncode, output=output
        )
        if not status.ok:
            logger.info("`%s` exited with status %d", status.render(), status.returncode)
        return status

