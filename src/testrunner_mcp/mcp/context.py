"""Application context for MCP handlers.

Single object passed to all tool handlers with access to ops classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from testrunner_mcp.config.models import TestRunnerConfig
    from testrunner_mcp.runners.ops import TestRunnerOps


@dataclass(frozen=True)
class AppContext:
    """Context object passed to all MCP tool handlers.

    Read-only after creation; shared by concurrent requests.
    """

    config: TestRunnerConfig
    runner_ops: TestRunnerOps

    @classmethod
    def create(cls, config: TestRunnerConfig) -> AppContext:
        """Factory to create context with all ops wired together."""
        from testrunner_mcp.runners.ops import TestRunnerOps

        return cls(config=config, runner_ops=TestRunnerOps(config))
