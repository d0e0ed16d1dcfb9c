"""test-runner-mcp - guarded RSpec and Cypress execution for MCP clients."""
