"""Command building and subprocess execution.

The only place where validated caller input reaches a process. Builders are
pure; the executor spawns exactly one process per call, waits for it to exit
and buffers all of its output. There is no timeout and no retry: a hung
runner blocks its request until the transport cancels it.
"""

from __future__ import annotations

import asyncio
import shlex
import time
from collections.abc import Sequence
from pathlib import Path

import structlog

from testrunner_mcp.core.errors import ExecutionError
from testrunner_mcp.execution.models import CommandTemplate, ExecutionResult
from testrunner_mcp.validation.paths import ValidatedFileTarget

log = structlog.get_logger(__name__)

_SHELL = "/bin/sh"


def build_file_command(template: CommandTemplate, target: ValidatedFileTarget) -> list[str]:
    """Append a validated file target as a single trailing argument."""
    return [*template.argv, target.argument]


def build_argument_command(template: CommandTemplate, tokens: Sequence[str]) -> list[str]:
    """Append a validated raw argument list verbatim."""
    return [*template.argv, *tokens]


def build_shell_command(command: str, path: str) -> str:
    """Interpolate a validated path into a shell command line.

    Only for configured commands that are themselves pipelines. The path is
    quoted so it stays one word whatever it contains.
    """
    return f"{command} {shlex.quote(path)}"


def _exit_code(returncode: int | None) -> int | None:
    # Negative return codes mean the child was killed by a signal
    if returncode is None or returncode < 0:
        return None
    return returncode


class CommandExecutor:
    """Runs one command to completion and captures its output."""

    def __init__(self, cwd: Path | None = None) -> None:
        self._cwd = cwd

    async def run(self, argv: Sequence[str], *, cwd: Path | None = None) -> ExecutionResult:
        """Spawn ``argv`` directly (no shell) and wait for it to finish.

        Raises:
            ExecutionError: If the process could not be started.
        """
        workdir = cwd or self._cwd
        command = tuple(argv)
        log.info("command_start", program=command[0], argc=len(command), cwd=str(workdir or "."))
        log.debug("command_argv", argv=list(command))
        start_time = time.perf_counter()

        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=workdir,
            )
        except OSError as e:
            log.error("command_spawn_failed", program=command[0], error=str(e))
            raise ExecutionError.spawn_failed(command[0], str(e)) from e

        return await self._collect(proc, command, start_time)

    async def run_shell(self, command_line: str, *, cwd: Path | None = None) -> ExecutionResult:
        """Run a command line through ``/bin/sh -c`` and wait for it to finish.

        Raises:
            ExecutionError: If the shell could not be started.
        """
        workdir = cwd or self._cwd
        command = (_SHELL, "-c", command_line)
        log.info("command_start", program=_SHELL, shell=True, cwd=str(workdir or "."))
        log.debug("command_line", command=command_line)
        start_time = time.perf_counter()

        try:
            proc = await asyncio.create_subprocess_shell(
                command_line,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=workdir,
            )
        except OSError as e:
            log.error("command_spawn_failed", program=_SHELL, error=str(e))
            raise ExecutionError.spawn_failed(_SHELL, str(e)) from e

        return await self._collect(proc, command, start_time)

    async def _collect(
        self,
        proc: asyncio.subprocess.Process,
        command: tuple[str, ...],
        start_time: float,
    ) -> ExecutionResult:
        stdout_bytes, stderr_bytes = await proc.communicate()
        result = ExecutionResult(
            exit_code=_exit_code(proc.returncode),
            stdout=stdout_bytes.decode(errors="replace"),
            stderr=stderr_bytes.decode(errors="replace"),
            command=command,
        )
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        log.info(
            "command_complete",
            program=command[0],
            exit_code=result.exit_code_display,
            stdout_bytes=len(stdout_bytes),
            stderr_bytes=len(stderr_bytes),
            elapsed_ms=elapsed_ms,
        )
        return result
