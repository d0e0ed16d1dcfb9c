"""Testing MCP tools - guarded test execution.

- run_rspec: Run one spec file, optionally at specific lines
- run_rspec_args: Run RSpec with an allowlisted argument list
- run_cypress: Run one Cypress spec and return its parsed JSON report
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from testrunner_mcp.core.errors import ExecutionError, InputValidationError
from testrunner_mcp.mcp.errors import CommandFailedToStartError, InvalidParamsError
from testrunner_mcp.mcp.registry import registry

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from testrunner_mcp.mcp.context import AppContext
    from testrunner_mcp.runners.ops import RunReport


# =============================================================================
# Parameter Models
# =============================================================================


class _ToolParams(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RunRspecParams(_ToolParams):
    """Parameters for run_rspec."""

    file: str = Field(description='Spec file to run (e.g., "spec/models/user_spec.rb")')
    line_numbers: list[int] | None = Field(
        default=None,
        description="Only run the examples at these lines (e.g., [37, 87])",
    )


class RunRspecArgsParams(_ToolParams):
    """Parameters for run_rspec_args."""

    args: list[str] = Field(
        description="RSpec arguments, one token per item "
        '(e.g., ["--tag", "focus", "spec/models/user_spec.rb"]). '
        "Only allowlisted flags are accepted.",
    )


class RunCypressParams(_ToolParams):
    """Parameters for run_cypress."""

    file: str = Field(description='Cypress spec to run (e.g., "cypress/e2e/login.cy.js")')


# =============================================================================
# Summary Helpers
# =============================================================================


def _display_run(label: str, report: RunReport) -> str:
    """Human-friendly one-liner for a finished run."""
    if report.exit_code == 0:
        return f"{label}: {report.summary}."
    return f"{label}: {report.summary}. See the report for details."


def _serialize_report(label: str, report: RunReport) -> dict[str, Any]:
    output = report.to_dict()
    output["display_to_user"] = _display_run(label, report)
    return output


async def _guarded(run: Awaitable[RunReport]) -> RunReport:
    """Await a run, translating domain errors into MCP errors."""
    try:
        return await run
    except InputValidationError as e:
        raise InvalidParamsError(e) from e
    except ExecutionError as e:
        raise CommandFailedToStartError(e) from e


# =============================================================================
# Tool Handlers
# =============================================================================


@registry.register(
    "run_rspec",
    "Run RSpec tests for one spec file. Optionally restrict to examples at the given "
    "line numbers. Returns exit code, output and errors.",
    RunRspecParams,
)
async def run_rspec(ctx: AppContext, params: RunRspecParams) -> dict[str, Any]:
    report = await _guarded(ctx.runner_ops.run_rspec(params.file, params.line_numbers))
    return _serialize_report("RSpec", report)


@registry.register(
    "run_rspec_args",
    "Run RSpec with custom arguments. Flags must come from a fixed allowlist "
    "(--tag, --example, --seed, --order, --format, --fail-fast, ...); bare arguments "
    "must be spec files. The executed command line is echoed in the report.",
    RunRspecArgsParams,
)
async def run_rspec_args(ctx: AppContext, params: RunRspecArgsParams) -> dict[str, Any]:
    report = await _guarded(ctx.runner_ops.run_rspec_args(params.args))
    return _serialize_report("RSpec", report)


@registry.register(
    "run_cypress",
    "Run one Cypress spec file and return the parsed JSON results. Falls back to "
    "the raw output when the results cannot be parsed.",
    RunCypressParams,
)
async def run_cypress(ctx: AppContext, params: RunCypressParams) -> dict[str, Any]:
    report = await _guarded(ctx.runner_ops.run_cypress(params.file))
    return _serialize_report("Cypress", report)
