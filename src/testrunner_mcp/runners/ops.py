"""Test runner operations - validate, execute, report.

Each operation validates everything the caller sent before spawning anything,
runs exactly one subprocess, and turns the captured output into report text.
A non-zero exit code is part of the report, never an error.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from testrunner_mcp.core.errors import InputValidationError
from testrunner_mcp.cypress.pipeline import PipelineOutcome, process_output
from testrunner_mcp.execution.models import CommandTemplate, ExecutionResult
from testrunner_mcp.execution.ops import (
    CommandExecutor,
    build_argument_command,
    build_file_command,
    build_shell_command,
)
from testrunner_mcp.validation.arguments import validate_arguments
from testrunner_mcp.validation.paths import (
    FileKind,
    build_file_target,
    normalize_to_working_directory,
)

if TYPE_CHECKING:
    from testrunner_mcp.config.models import TestRunnerConfig

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RunReport:
    """Report handed back to the caller for one test run."""

    text: str
    exit_code: int | None
    command: tuple[str, ...]
    summary: str

    def to_dict(self) -> dict[str, object]:
        return {
            "report": self.text,
            "exit_code": self.exit_code,
            "command": list(self.command),
            "summary": self.summary,
        }


# =============================================================================
# Report Formatting
# =============================================================================


def format_rspec_report(target: str, result: ExecutionResult) -> str:
    return (
        f"RSpec Test Results for: {target}\n"
        f"Exit Code: {result.exit_code_display}\n\n"
        f"Output:\n{result.stdout}\n\n"
        f"Errors:\n{result.stderr}"
    )


def format_rspec_args_report(result: ExecutionResult) -> str:
    return (
        "RSpec Test Results\n"
        f"Command: {result.command_line}\n"
        f"Exit Code: {result.exit_code_display}\n\n"
        f"Output:\n{result.stdout}\n\n"
        f"Errors:\n{result.stderr}"
    )


def format_cypress_report(file: str, result: ExecutionResult, outcome: PipelineOutcome) -> str:
    header = f"Cypress Test Results for: {file}\nExit Code: {result.exit_code_display}\n\n"
    if outcome.results_json is not None:
        return f"{header}Results:\n{outcome.results_json}\n\nErrors:\n{result.stderr}"

    return (
        f"{header}"
        f"Could not process Cypress JSON output ({outcome.failed_stage} stage): "
        f"{outcome.reason}\n\n"
        f"Output:\n{result.stdout}\n\n"
        f"Errors:\n{result.stderr}"
    )


def _summarize(result: ExecutionResult) -> str:
    if result.succeeded:
        return "passed"
    if result.exit_code is None:
        return "terminated by signal"
    return f"failed (exit code {result.exit_code})"


def _summarize_cypress(result: ExecutionResult, outcome: PipelineOutcome) -> str:
    if outcome.results is None:
        return f"{_summarize(result)}, unparsed output"
    stats = outcome.results.stats
    parts = [f"{stats.passes} passed"]
    if stats.failures:
        parts.append(f"{stats.failures} failed")
    if stats.pending:
        parts.append(f"{stats.pending} pending")
    return f"{', '.join(parts)} ({stats.duration}ms)"


# =============================================================================
# Operations
# =============================================================================


class TestRunnerOps:
    """RSpec and Cypress runs for the MCP tools.

    Configuration is read once at construction and never mutated, so a single
    instance serves concurrent requests.
    """

    __test__ = False

    def __init__(
        self,
        config: TestRunnerConfig,
        executor: CommandExecutor | None = None,
    ) -> None:
        self._rspec = CommandTemplate.parse(config.rspec.command)
        self._cypress_command = config.cypress.command
        self._cypress = CommandTemplate.parse(config.cypress.command)
        self._cypress_shell = config.cypress.shell
        self._working_directory = config.cypress.working_directory
        self._executor = executor or CommandExecutor()

    async def run_rspec(self, file: str, line_numbers: Sequence[int] | None = None) -> RunReport:
        """Run RSpec for one spec file, optionally filtered to line numbers.

        Raises:
            PathValidationError: If the file or a line number is rejected.
            ExecutionError: If the command could not be started.
        """
        try:
            target = build_file_target(file, line_numbers, FileKind.RSPEC)
        except InputValidationError as e:
            log.warning("path_rejected", kind=FileKind.RSPEC.value, error=e.error_name)
            raise

        result = await self._executor.run(build_file_command(self._rspec, target))
        return RunReport(
            text=format_rspec_report(target.argument, result),
            exit_code=result.exit_code,
            command=result.command,
            summary=_summarize(result),
        )

    async def run_rspec_args(self, args: Sequence[str]) -> RunReport:
        """Run RSpec with a caller-supplied argument list.

        Raises:
            ArgumentValidationError: If a flag or value is rejected.
            PathValidationError: If a bare spec path is rejected.
            ExecutionError: If the command could not be started.
        """
        tokens = list(args)
        try:
            validate_arguments(tokens)
        except InputValidationError as e:
            log.warning("arguments_rejected", error=e.error_name, argc=len(tokens))
            raise

        result = await self._executor.run(build_argument_command(self._rspec, tokens))
        return RunReport(
            text=format_rspec_args_report(result),
            exit_code=result.exit_code,
            command=result.command,
            summary=_summarize(result),
        )

    async def run_cypress(self, file: str) -> RunReport:
        """Run Cypress for one spec file and parse its JSON report.

        Output that cannot be parsed still produces a report, carrying the
        raw stdout and stderr.

        Raises:
            PathValidationError: If the file is rejected.
            ExecutionError: If the command could not be started.
        """
        try:
            target = build_file_target(file, None, FileKind.CYPRESS)
        except InputValidationError as e:
            log.warning("path_rejected", kind=FileKind.CYPRESS.value, error=e.error_name)
            raise

        spec_path = normalize_to_working_directory(target.file_path, self._working_directory)

        if self._cypress_shell:
            # The configured pipeline handles its own directory changes
            result = await self._executor.run_shell(
                build_shell_command(self._cypress_command, spec_path)
            )
        else:
            result = await self._executor.run(
                [*self._cypress.argv, spec_path],
                cwd=Path(self._working_directory),
            )

        outcome = process_output(result.stdout)
        return RunReport(
            text=format_cypress_report(file, result, outcome),
            exit_code=result.exit_code,
            command=result.command,
            summary=_summarize_cypress(result, outcome),
        )
