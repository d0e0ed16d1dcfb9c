"""FastMCP server creation and wiring.

Two-phase tool logging: tool_start with params, tool_complete with summary.
Expected failures (bad input, runner not startable) are logged as warnings
without tracebacks; anything else is logged as an internal error.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog
from fastmcp.utilities.json_schema import dereference_refs
from pydantic import BaseModel, Field

from testrunner_mcp.core.errors import InternalError
from testrunner_mcp.core.logging import tool_call_context

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from testrunner_mcp.mcp.context import AppContext
    from testrunner_mcp.mcp.registry import ToolSpec

log = structlog.get_logger(__name__)

SERVER_NAME = "test-runner-mcp"

SERVER_INSTRUCTIONS = (
    "Test runner server. Tools: run_rspec (run RSpec for a spec file, optionally at "
    "line numbers), run_rspec_args (run RSpec with allowlisted arguments), "
    "run_cypress (run a Cypress spec and return parsed JSON results)."
)


class ToolResponse(BaseModel):
    """Standardized tool response envelope."""

    result: Any = None
    meta: dict[str, Any] = Field(default_factory=dict)

    success: bool
    error: str | None = None


def _extract_log_params(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Extract parameters for the tool_start log line.

    Long strings and lists are shortened so caller input cannot flood logs.
    """
    params: dict[str, Any] = {}

    for key, value in kwargs.items():
        if isinstance(value, str) and len(value) > 80:
            params[key] = value[:80] + "..."
        elif isinstance(value, list) and len(value) > 5:
            params[key] = f"[{len(value)} items]"
        elif value is not None:
            params[key] = value

    return params


def _extract_result_summary(result: dict[str, Any]) -> dict[str, Any]:
    """Extract summary fields from a tool result for logging."""
    summary: dict[str, Any] = {}
    if "exit_code" in result:
        summary["exit_code"] = result["exit_code"]
    if "summary" in result:
        summary["summary"] = result["summary"]
    return summary


def create_mcp_server(context: AppContext) -> FastMCP:
    """Create FastMCP server with all tools wired to context.

    Args:
        context: AppContext with the runner ops

    Returns:
        Configured FastMCP server ready to run
    """
    from fastmcp import FastMCP

    from testrunner_mcp.mcp.registry import registry

    # Import tools to trigger registration
    from testrunner_mcp.mcp.tools import testing  # noqa: F401

    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)

    for spec in registry:
        _wire_tool(mcp, spec, context)

    log.info("mcp_server_created", tool_count=len(registry))

    return mcp


def _make_handler(spec: ToolSpec, context: AppContext) -> Any:
    """Build the async handler FastMCP calls for one tool."""
    from pydantic import ValidationError

    from testrunner_mcp.mcp.errors import MCPError

    params_model = spec.params_model
    spec_handler = spec.handler

    async def handler(**kwargs: Any) -> dict[str, Any]:
        with tool_call_context(spec.name) as request_id:
            start_time = time.perf_counter()

            log.info("tool_start", **_extract_log_params(kwargs))

            try:
                params = params_model(**kwargs)
            except ValidationError as e:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                first = e.errors()[0]["msg"] if e.errors() else str(e)
                log.warning("tool_validation_error", error=first, elapsed_ms=elapsed_ms)
                return ToolResponse(
                    success=False,
                    result=None,
                    error=f"Validation error: {first}",
                    meta={
                        "request_id": request_id,
                        "error_type": "validation",
                        "validation_errors": [
                            {"field": ".".join(str(x) for x in err["loc"]), "message": err["msg"]}
                            for err in e.errors()[:5]
                        ],
                    },
                ).model_dump()

            try:
                result_data = await spec_handler(context, params)
            except MCPError as e:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                log.warning(
                    "tool_error",
                    error_code=e.code.value,
                    error=e.message,
                    path=e.path,
                    elapsed_ms=elapsed_ms,
                )
                return ToolResponse(
                    success=False,
                    result=None,
                    error=e.message,
                    meta={
                        "request_id": request_id,
                        "error": e.to_response().to_dict(),
                    },
                ).model_dump()
            except Exception as e:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                error = InternalError.unexpected(str(e), tool=spec.name)
                log.error(
                    "tool_internal_error",
                    error=error.message,
                    exception=type(e).__name__,
                    elapsed_ms=elapsed_ms,
                )
                log.debug("tool_internal_error_traceback", exc_info=True)
                return ToolResponse(
                    success=False,
                    result=None,
                    error=error.message,
                    meta={
                        "request_id": request_id,
                        "error": error.to_dict(),
                    },
                ).model_dump()

            elapsed_ms = int((time.perf_counter() - start_time) * 1000)
            log.info(
                "tool_complete",
                elapsed_ms=elapsed_ms,
                **_extract_result_summary(result_data),
            )
            return ToolResponse(
                success=True,
                result=result_data,
                meta={
                    "request_id": request_id,
                    "timestamp": int(time.time() * 1000),
                },
            ).model_dump()

    return handler


def _wire_tool(mcp: FastMCP, spec: ToolSpec, context: AppContext) -> None:
    """Wire a single tool spec to FastMCP.

    The handler takes the params model's fields as direct keyword arguments
    and the schema is fully dereferenced, so clients see a flat schema.
    """
    from fastmcp.tools.tool import FunctionTool

    flat_schema = dereference_refs(spec.params_model.model_json_schema())

    tool = FunctionTool(
        name=spec.name,
        description=spec.description,
        parameters=flat_schema,
        fn=_make_handler(spec, context),
    )

    mcp.add_tool(tool)
