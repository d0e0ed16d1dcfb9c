"""Execution data structures."""

from __future__ import annotations

import shlex
from dataclasses import dataclass


@dataclass(frozen=True)
class CommandTemplate:
    """A trusted, operator-configured command split into program and fixed args."""

    program: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, command: str) -> CommandTemplate:
        """Split a configured command line using POSIX shell quoting rules."""
        parts = shlex.split(command)
        if not parts:
            raise ValueError("command must not be empty")
        return cls(program=parts[0], args=tuple(parts[1:]))

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.program, *self.args)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a single completed subprocess.

    ``exit_code`` is None when the process was killed by a signal.
    """

    exit_code: int | None
    stdout: str
    stderr: str
    command: tuple[str, ...] = ()

    @property
    def exit_code_display(self) -> str:
        return "unknown" if self.exit_code is None else str(self.exit_code)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)
