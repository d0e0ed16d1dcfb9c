"""MCP tool handlers."""

from testrunner_mcp.mcp.tools import testing

__all__ = ["testing"]
