"""MCP server module - FastMCP tool registration and wiring."""

from testrunner_mcp.mcp.context import AppContext
from testrunner_mcp.mcp.registry import ToolRegistry, ToolSpec
from testrunner_mcp.mcp.server import create_mcp_server

__all__ = ["AppContext", "ToolRegistry", "ToolSpec", "create_mcp_server"]
