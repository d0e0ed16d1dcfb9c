"""Core module exports."""

from testrunner_mcp.core.errors import (
    ArgumentValidationError,
    ConfigError,
    CypressOutputError,
    ErrorCode,
    ExecutionError,
    InputValidationError,
    InternalError,
    PathValidationError,
    TestRunnerError,
)
from testrunner_mcp.core.logging import (
    configure_logging,
    get_request_id,
    new_request_id,
    tool_call_context,
)

__all__ = [
    # Errors
    "ArgumentValidationError",
    "ConfigError",
    "CypressOutputError",
    "ErrorCode",
    "ExecutionError",
    "InputValidationError",
    "InternalError",
    "PathValidationError",
    "TestRunnerError",
    # Logging
    "configure_logging",
    "get_request_id",
    "new_request_id",
    "tool_call_context",
]
