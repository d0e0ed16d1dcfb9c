"""Subprocess construction and execution."""

from testrunner_mcp.execution.models import CommandTemplate, ExecutionResult
from testrunner_mcp.execution.ops import (
    CommandExecutor,
    build_argument_command,
    build_file_command,
    build_shell_command,
)

__all__ = [
    "CommandExecutor",
    "CommandTemplate",
    "ExecutionResult",
    "build_argument_command",
    "build_file_command",
    "build_shell_command",
]
