"""Shared fixtures for MCP tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from testrunner_mcp.config.models import TestRunnerConfig
from testrunner_mcp.mcp.registry import ToolRegistry
from testrunner_mcp.runners.ops import RunReport


@pytest.fixture
def clean_registry() -> ToolRegistry:
    """An empty registry, separate from the one the tool modules fill."""
    return ToolRegistry()


@pytest.fixture
def passed_report() -> RunReport:
    return RunReport(
        text="RSpec Test Results for: spec/a_spec.rb\nExit Code: 0\n\nOutput:\n.\n\nErrors:\n",
        exit_code=0,
        command=("rspec", "spec/a_spec.rb"),
        summary="passed",
    )


@pytest.fixture
def mock_runner_ops(passed_report: RunReport) -> MagicMock:
    """Create a mock TestRunnerOps."""
    mock = MagicMock()
    mock.run_rspec = AsyncMock(return_value=passed_report)
    mock.run_rspec_args = AsyncMock(return_value=passed_report)
    mock.run_cypress = AsyncMock(return_value=passed_report)
    return mock


@pytest.fixture
def mock_context(mock_runner_ops: MagicMock) -> MagicMock:
    """Create a mocked AppContext."""
    ctx = MagicMock()
    ctx.config = TestRunnerConfig()
    ctx.runner_ops = mock_runner_ops
    return ctx
