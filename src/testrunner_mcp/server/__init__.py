"""HTTP server hosting the MCP SSE endpoint."""

from testrunner_mcp.server.app import create_app
from testrunner_mcp.server.lifecycle import endpoint_urls, run_server

__all__ = ["create_app", "endpoint_urls", "run_server"]
