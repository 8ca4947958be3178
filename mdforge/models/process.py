"""Structured result of an external program invocation."""

from __future__ import annotations

import shlex

from pydantic import BaseModel, ConfigDict


class ExitStatus(BaseModel):
    """Exit code plus whatever stdout was captured (empty when streamed)."""

    model_config = ConfigDict(frozen=True)

    command: tuple[str, ...]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def program(self) -> str:
        return self.command[0] if self.command else ""

    def render(self) -> str:
        return shlex.join(self.command)
