"""Command execution abstraction used to run the external agent."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class CommandSpec:
    """One process invocation."""

    program: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured streams of a finished process."""

    exit_code: int
    stdout: bytes = b""
    stderr: bytes = field(default=b"", repr=False)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandExecutor(Protocol):
    async def run(self, spec: CommandSpec) -> CommandResult: ...


class SubprocessExecutor:
    """Run commands as asyncio subprocesses, capturing both streams fully."""

    async def run(self, spec: CommandSpec) -> CommandResult:
        process = await asyncio.create_subprocess_exec(
            spec.program,
            *spec.args,
            cwd=str(spec.cwd) if spec.cwd is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
        return CommandResult(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=stdout_bytes or b"",
            stderr=stderr_bytes or b"",
        )
