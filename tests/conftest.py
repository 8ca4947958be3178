"""Shared test fixtures for mdforge."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import pytest
from rich.console import Console

from mdforge.config import EngineSettings
from mdforge.console import StatusPrinter
from mdforge.core.engine import ProvisioningEngine
from mdforge.models.process import ExitStatus

Hook = Callable[[tuple[str, ...], Path | None], None]


@dataclass
class Call:
    command: tuple[str, ...]
    cwd: Path | None
    env: Mapping[str, str] | None
    capture: bool


class FakeRunner:
    """Scripted stand-in for external programs.

    Records every invocation. ``fail_on`` makes a program exit non-zero,
    ``on`` attaches a side effect that mimics what the real tool leaves on
    disk.
    """

    def __init__(
        self, env_output: str = "\0__MDFORGE_ENV__\0PATH=/usr/bin\0HOME=/home/test\0"
    ) -> None:
        self.calls: list[Call] = []
        self.env_output = env_output
        self._failures: list[tuple[str, int, Callable[[tuple[str, ...]], bool]]] = []
        self._hooks: dict[str, Hook] = {}

    def fail_on(
        self,
        program: str,
        returncode: int = 1,
        when: Callable[[tuple[str, ...]], bool] = lambda command: True,
    ) -> None:
        self._failures.append((program, returncode, when))

    def on(self, program: str, hook: Hook) -> None:
        self._hooks[program] = hook

    def clear_failures(self) -> None:
        self._failures.clear()

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
        self.calls.append(Call(command, cwd, env, capture))
        # Side effects first: a failing tool may still leave partial output.
        hook = self._hooks.get(cmd)
        if hook is not None:
            hook(command, cwd)
        for program, returncode, when in self._failures:
            if program == cmd and when(command):
                return ExitStatus(command=command, returncode=returncode)
        return ExitStatus(
            command=command, returncode=0, output=self.env_output if capture else ""
        )

    @property
    def programs(self) -> list[str]:
        return [c.command[0] for c in self.calls]

    def calls_to(self, program: str) -> list[Call]:
        return [c for c in self.calls if c.command[0] == program]


def simulate_tools(runner: FakeRunner) -> FakeRunner:
    """Attach side effects that mimic wget, unzip, git and make install."""

    def wget(command: tuple[str, ...], cwd: Path | None) -> None:
        Path(command[command.index("-O") + 1]).write_bytes(b"PK\x03\x04")

    def unzip(command: tuple[str, ...], cwd: Path | None) -> None:
        destination = Path(command[command.index("-d") + 1])
        (destination / "libtorch" / "lib").mkdir(parents=True)

    def git(command: tuple[str, ...], cwd: Path | None) -> None:
        (Path(command[-1]) / "cmake" / "presets").mkdir(parents=True)

    def make(command: tuple[str, ...], cwd: Path | None) -> None:
        if "install" in command and cwd is not None:
            # cwd is <temp>/lammps/build; the prefix is recorded by cmake
            prefix = _installed_prefix(runner)
            lmp = prefix / "bin" / "lmp"
            lmp.parent.mkdir(parents=True, exist_ok=True)
            lmp.write_text("#!/bin/sh\n")
            lmp.chmod(0o755)

    runner.on("wget", wget)
    runner.on("unzip", unzip)
    runner.on("git", git)
    runner.on("make", make)
    return runner


def _installed_prefix(runner: FakeRunner) -> Path:
    for call in runner.calls_to("cmake"):
        for arg in call.command:
            if arg.startswith("-DCMAKE_INSTALL_PREFIX="):
                return Path(arg.split("=", 1)[1])
    raise AssertionError("make install ran before cmake")


@pytest.fixture
def runner() -> FakeRunner:
    """A fake runner whose tools leave the expected files behind."""
    return simulate_tools(FakeRunner())


@pytest.fixture
def printer() -> StatusPrinter:
    """A printer recording into memory instead of the terminal."""
    return StatusPrinter(Console(record=True, width=200, highlight=False))


@pytest.fixture
def preset_file(tmp_path: Path) -> Path:
    preset = tmp_path / "site" / "puhti-gpu.cmake"
    preset.parent.mkdir()
    preset.write_text('set(PKG_KOKKOS ON CACHE BOOL "" FORCE)\n')
    return preset


@pytest.fixture
def settings(tmp_path: Path, preset_file: Path) -> EngineSettings:
    """Settings isolated from the host environment and .env files."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return EngineSettings(
        _env_file=None,
        project=None,
        projappl_root=tmp_path / "projappl",
        tmpdir=scratch,
        preset_source=preset_file,
    )


@pytest.fixture
def engine(
    settings: EngineSettings, runner: FakeRunner, printer: StatusPrinter
) -> ProvisioningEngine:
    return ProvisioningEngine(settings, runner=runner, printer=printer)


@pytest.fixture
def output(printer: StatusPrinter) -> Callable[[], str]:
    """Everything printed so far, as plain text."""
    return lambda: printer.console.export_text(clear=False)


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    """Factory for extra runners, with or without simulated tools."""

    def _factory(*, simulated: bool = True, **kwargs: str) -> FakeRunner:
        fake = FakeRunner(**kwargs)
        return simulate_tools(fake) if simulated else fake

    return _factory
