"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are security limits and protocol constraints.

For configurable values, see models.py.
"""

# =============================================================================
# Argument Limits
# =============================================================================
# Hard caps applied to raw RSpec argument lists before anything is executed.

MAX_ARGUMENTS = 50
"""Maximum number of tokens in a raw argument list."""

MAX_ARGUMENT_LENGTH = 1000
"""Maximum length of a single argument token."""

# =============================================================================
# Server Defaults
# =============================================================================

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 30301

SSE_PATH = "/sse"
"""Endpoint for the MCP event stream."""

MESSAGE_PATH = "/messages/"
"""Where clients POST JSON-RPC messages.

This is FastMCP's SSE default, announced to clients in the stream's first
`endpoint` event. Clients that hard-code `/message` must follow that event.
"""

# =============================================================================
# Protocol/Validation Constants
# =============================================================================

PORT_MIN = 0
PORT_MAX = 65535
"""Valid port range."""

CURRENT_DIRECTORY = "."
"""Working-directory sentinel meaning 'no prefix rewriting'."""
