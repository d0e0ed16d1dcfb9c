"""Structured error system for MCP tools.

Provides typed exceptions with error codes and remediation hints.
Enables agents to understand failures and self-correct.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from fastmcp.exceptions import ToolError

from testrunner_mcp.core.errors import (
    ArgumentValidationError,
    ExecutionError,
    InputValidationError,
)


class MCPErrorCode(StrEnum):
    """Machine-readable error codes for MCP tool failures."""

    # Validation errors - agent should fix input
    INVALID_PARAMS = "INVALID_PARAMS"

    # System errors - the server environment is broken
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class ErrorResponse:
    """Structured error response for MCP tools."""

    code: MCPErrorCode
    message: str
    remediation: str
    path: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "remediation": self.remediation,
            "path": self.path,
            "context": self.context,
        }


class MCPError(ToolError):
    """Base exception for MCP tool errors with structured response.

    Extends FastMCP's ToolError so FastMCP passes it through instead of
    wrapping it in a generic ToolError.
    """

    def __init__(
        self,
        code: MCPErrorCode,
        message: str,
        remediation: str,
        path: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.remediation = remediation
        self.path = path
        self.context = context

    def to_response(self) -> ErrorResponse:
        """Convert to ErrorResponse."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            remediation=self.remediation,
            path=self.path,
            context=self.context,
        )


# =============================================================================
# Specific Error Classes
# =============================================================================


class InvalidParamsError(MCPError):
    """Raised when caller input was rejected by a validator."""

    _RESERVED_KEYS = frozenset({"code", "message", "remediation", "path", "reason"})

    def __init__(self, error: InputValidationError) -> None:
        context = {k: v for k, v in error.details.items() if k not in self._RESERVED_KEYS}
        if isinstance(error, ArgumentValidationError):
            remediation = (
                "Use only allowlisted RSpec flags, give value flags a value, and avoid "
                "shell metacharacters. Bare arguments must be *_spec.rb files."
            )
        else:
            remediation = (
                "Pass a repository-relative test file path with the expected suffix, "
                "without '../', and use positive line numbers."
            )
        super().__init__(
            code=MCPErrorCode.INVALID_PARAMS,
            message=f"Invalid parameters: {error.message}",
            remediation=remediation,
            path=error.details.get("path"),
            reason=error.error_name,
            **context,
        )


class CommandFailedToStartError(MCPError):
    """Raised when the test command could not be spawned."""

    def __init__(self, error: ExecutionError) -> None:
        super().__init__(
            code=MCPErrorCode.INTERNAL_ERROR,
            message=error.message,
            remediation="Check the configured runner command and that its executable "
            "is installed and on PATH for the server process.",
            reason=error.error_name,
            **{k: v for k, v in error.details.items() if k != "reason"},
        )
