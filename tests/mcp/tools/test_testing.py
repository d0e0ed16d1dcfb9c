"""Tests for the testing MCP tools."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from testrunner_mcp.core.errors import (
    ArgumentValidationError,
    ExecutionError,
    PathValidationError,
)
from testrunner_mcp.mcp.errors import (
    CommandFailedToStartError,
    InvalidParamsError,
    MCPErrorCode,
)
from testrunner_mcp.mcp.tools.testing import (
    RunCypressParams,
    RunRspecArgsParams,
    RunRspecParams,
    run_cypress,
    run_rspec,
    run_rspec_args,
)
from testrunner_mcp.runners.ops import RunReport


class TestParams:
    def test_rspec_line_numbers_optional(self) -> None:
        params = RunRspecParams(file="spec/a_spec.rb")
        assert params.line_numbers is None

    def test_rspec_line_numbers_must_be_ints(self) -> None:
        with pytest.raises(ValidationError):
            RunRspecParams(file="spec/a_spec.rb", line_numbers=["ten"])  # type: ignore[list-item]

    def test_args_required(self) -> None:
        with pytest.raises(ValidationError):
            RunRspecArgsParams()  # type: ignore[call-arg]

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            RunCypressParams(file="a.cy.js", browser="chrome")  # type: ignore[call-arg]


class TestRunRspecTool:
    @pytest.mark.asyncio
    async def test_returns_report_dict(self, mock_context: MagicMock) -> None:
        result = await run_rspec(
            mock_context, RunRspecParams(file="spec/a_spec.rb", line_numbers=[3])
        )

        mock_context.runner_ops.run_rspec.assert_awaited_once_with("spec/a_spec.rb", [3])
        assert result["exit_code"] == 0
        assert result["summary"] == "passed"
        assert result["command"] == ["rspec", "spec/a_spec.rb"]
        assert result["report"].startswith("RSpec Test Results for: spec/a_spec.rb")
        assert result["display_to_user"] == "RSpec: passed."

    @pytest.mark.asyncio
    async def test_failure_points_at_report(self, mock_context: MagicMock) -> None:
        mock_context.runner_ops.run_rspec.return_value = RunReport(
            text="...", exit_code=1, command=("rspec",), summary="failed (exit code 1)"
        )

        result = await run_rspec(mock_context, RunRspecParams(file="spec/a_spec.rb"))

        assert result["display_to_user"] == (
            "RSpec: failed (exit code 1). See the report for details."
        )

    @pytest.mark.asyncio
    async def test_path_error_becomes_invalid_params(self, mock_context: MagicMock) -> None:
        mock_context.runner_ops.run_rspec.side_effect = PathValidationError.traversal(
            "../a_spec.rb"
        )

        with pytest.raises(InvalidParamsError) as exc_info:
            await run_rspec(mock_context, RunRspecParams(file="../a_spec.rb"))

        assert exc_info.value.code == MCPErrorCode.INVALID_PARAMS
        assert exc_info.value.path == "../a_spec.rb"

    @pytest.mark.asyncio
    async def test_spawn_failure_becomes_internal_error(self, mock_context: MagicMock) -> None:
        mock_context.runner_ops.run_rspec.side_effect = ExecutionError.spawn_failed(
            "docker", "not found"
        )

        with pytest.raises(CommandFailedToStartError) as exc_info:
            await run_rspec(mock_context, RunRspecParams(file="spec/a_spec.rb"))

        assert exc_info.value.code == MCPErrorCode.INTERNAL_ERROR


class TestRunRspecArgsTool:
    @pytest.mark.asyncio
    async def test_passes_args_through(self, mock_context: MagicMock) -> None:
        await run_rspec_args(mock_context, RunRspecArgsParams(args=["--tag", "focus"]))

        mock_context.runner_ops.run_rspec_args.assert_awaited_once_with(["--tag", "focus"])

    @pytest.mark.asyncio
    async def test_argument_error_becomes_invalid_params(self, mock_context: MagicMock) -> None:
        mock_context.runner_ops.run_rspec_args.side_effect = (
            ArgumentValidationError.disallowed_flag("--exec")
        )

        with pytest.raises(InvalidParamsError) as exc_info:
            await run_rspec_args(mock_context, RunRspecArgsParams(args=["--exec"]))

        assert exc_info.value.message == "Invalid parameters: Flag not allowed: --exec"


class TestRunCypressTool:
    @pytest.mark.asyncio
    async def test_labels_display(self, mock_context: MagicMock) -> None:
        result = await run_cypress(mock_context, RunCypressParams(file="e2e/a.cy.js"))

        mock_context.runner_ops.run_cypress.assert_awaited_once_with("e2e/a.cy.js")
        assert result["display_to_user"].startswith("Cypress: ")
