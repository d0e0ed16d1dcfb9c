"""Tests for mcp/server.py module.

Covers:
- ToolResponse model
- _extract_log_params() and _extract_result_summary()
- create_mcp_server() tool wiring
- Tool handler envelope for success, validation and tool errors
"""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import structlog
from pydantic import BaseModel, ConfigDict

from testrunner_mcp.core.errors import PathValidationError
from testrunner_mcp.core.logging import get_request_id
from testrunner_mcp.mcp.errors import InvalidParamsError
from testrunner_mcp.mcp.registry import ToolSpec
from testrunner_mcp.mcp.server import (
    SERVER_NAME,
    ToolResponse,
    _extract_log_params,
    _extract_result_summary,
    _make_handler,
    create_mcp_server,
)


class _EchoParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file: str
    count: int = 1


def _spec(handler: Any) -> ToolSpec:
    return ToolSpec(
        name="echo",
        handler=handler,
        description="Echo",
        params_model=_EchoParams,
    )


class TestToolResponse:
    """Tests for ToolResponse model."""

    def test_create_success_response(self) -> None:
        response = ToolResponse(success=True, result={"data": "value"})
        assert response.success is True
        assert response.result == {"data": "value"}
        assert response.error is None
        assert response.meta == {}

    def test_create_error_response(self) -> None:
        response = ToolResponse(success=False, error="Something failed")
        assert response.success is False
        assert response.result is None

    def test_response_json_serializable(self) -> None:
        response = ToolResponse(success=True, result={"exit_code": 0}, meta={"request_id": "r"})

        parsed = json.loads(json.dumps(response.model_dump()))

        assert parsed["result"]["exit_code"] == 0
        assert parsed["meta"]["request_id"] == "r"


class TestExtractLogParams:
    def test_truncates_long_strings(self) -> None:
        result = _extract_log_params({"file": "x" * 100})
        assert result["file"] == "x" * 80 + "..."

    def test_summarizes_long_lists(self) -> None:
        result = _extract_log_params({"args": ["-b"] * 6})
        assert result["args"] == "[6 items]"

    def test_keeps_short_lists(self) -> None:
        result = _extract_log_params({"line_numbers": [1, 2]})
        assert result["line_numbers"] == [1, 2]

    def test_skips_none_values(self) -> None:
        result = _extract_log_params({"file": "a_spec.rb", "line_numbers": None})
        assert result == {"file": "a_spec.rb"}


class TestExtractResultSummary:
    def test_extracts_exit_code_and_summary(self) -> None:
        summary = _extract_result_summary({"exit_code": 1, "summary": "failed", "report": "..."})
        assert summary == {"exit_code": 1, "summary": "failed"}

    def test_empty_when_absent(self) -> None:
        assert _extract_result_summary({"other": 1}) == {}


class TestCreateMcpServer:
    def test_creates_named_server(self, mock_context: MagicMock) -> None:
        mcp = create_mcp_server(mock_context)
        assert mcp.name == SERVER_NAME

    def test_wires_every_registered_tool(self, mock_context: MagicMock) -> None:
        with patch("fastmcp.FastMCP.add_tool") as add_tool:
            create_mcp_server(mock_context)

        names = {call.args[0].name for call in add_tool.call_args_list}
        assert {"run_rspec", "run_rspec_args", "run_cypress"} <= names

    def test_wired_schema_is_flat(self, mock_context: MagicMock) -> None:
        with patch("fastmcp.FastMCP.add_tool") as add_tool:
            create_mcp_server(mock_context)

        tools = {call.args[0].name: call.args[0] for call in add_tool.call_args_list}
        schema = tools["run_rspec"].parameters
        assert "$defs" not in schema
        assert set(schema["properties"]) == {"file", "line_numbers"}
        assert schema["required"] == ["file"]


class TestToolHandler:
    """Handler envelope produced for each wired tool."""

    @pytest.mark.asyncio
    async def test_success_envelope(self, mock_context: MagicMock) -> None:
        seen: dict[str, Any] = {}

        async def echo(ctx: Any, params: _EchoParams) -> dict[str, Any]:
            _ = ctx
            seen["request_id"] = get_request_id()
            return {"file": params.file, "exit_code": 0}

        result = await _make_handler(_spec(echo), mock_context)(file="a_spec.rb")

        assert result["success"] is True
        assert result["result"] == {"file": "a_spec.rb", "exit_code": 0}
        assert result["meta"]["request_id"] == seen["request_id"]
        assert "timestamp" in result["meta"]

    @pytest.mark.asyncio
    async def test_tool_name_bound_during_call(self, mock_context: MagicMock) -> None:
        seen: dict[str, Any] = {}

        async def echo(ctx: Any, params: _EchoParams) -> dict[str, Any]:
            _ = ctx, params
            seen.update(structlog.contextvars.get_contextvars())
            return {}

        await _make_handler(_spec(echo), mock_context)(file="a_spec.rb")

        assert seen["tool"] == "echo"
        assert "tool" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_request_id_cleared_after_call(self, mock_context: MagicMock) -> None:
        async def echo(ctx: Any, params: _EchoParams) -> dict[str, Any]:
            _ = ctx, params
            return {}

        await _make_handler(_spec(echo), mock_context)(file="a_spec.rb")

        assert get_request_id() is None

    @pytest.mark.asyncio
    async def test_validation_error_envelope(self, mock_context: MagicMock) -> None:
        async def echo(ctx: Any, params: _EchoParams) -> dict[str, Any]:
            raise AssertionError("handler must not run")

        result = await _make_handler(_spec(echo), mock_context)(file="a_spec.rb", count="x")

        assert result["success"] is False
        assert result["error"].startswith("Validation error: ")
        assert result["meta"]["error_type"] == "validation"
        assert result["meta"]["validation_errors"][0]["field"] == "count"

    @pytest.mark.asyncio
    async def test_unknown_parameter_rejected(self, mock_context: MagicMock) -> None:
        async def echo(ctx: Any, params: _EchoParams) -> dict[str, Any]:
            raise AssertionError("handler must not run")

        result = await _make_handler(_spec(echo), mock_context)(file="a_spec.rb", extra=1)

        assert result["success"] is False
        assert result["meta"]["validation_errors"][0]["field"] == "extra"

    @pytest.mark.asyncio
    async def test_mcp_error_envelope(self, mock_context: MagicMock) -> None:
        async def echo(ctx: Any, params: _EchoParams) -> dict[str, Any]:
            _ = ctx
            raise InvalidParamsError(PathValidationError.traversal(params.file))

        result = await _make_handler(_spec(echo), mock_context)(file="../a_spec.rb")

        assert result["success"] is False
        assert result["error"] == "Invalid parameters: Path traversal is not allowed: ../a_spec.rb"
        error = result["meta"]["error"]
        assert error["code"] == "INVALID_PARAMS"
        assert error["path"] == "../a_spec.rb"
        assert error["context"]["reason"] == "PATH_TRAVERSAL"

    @pytest.mark.asyncio
    async def test_unexpected_error_envelope(self, mock_context: MagicMock) -> None:
        async def echo(ctx: Any, params: _EchoParams) -> dict[str, Any]:
            _ = ctx, params
            raise RuntimeError("kaboom")

        result = await _make_handler(_spec(echo), mock_context)(file="a_spec.rb")

        assert result["success"] is False
        assert result["error"] == "Internal error: kaboom"
        assert "request_id" in result["meta"]
        assert result["meta"]["error"]["code"] == 9001
        assert result["meta"]["error"]["details"] == {"tool": "echo"}
