"""Config module exports."""

from testrunner_mcp.config.loader import load_config
from testrunner_mcp.config.models import (
    CypressConfig,
    LoggingConfig,
    RspecConfig,
    ServerConfig,
    TestRunnerConfig,
)

__all__ = [
    "load_config",
    "CypressConfig",
    "LoggingConfig",
    "RspecConfig",
    "ServerConfig",
    "TestRunnerConfig",
]
