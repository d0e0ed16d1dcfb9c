"""Test runner operations."""

from testrunner_mcp.runners.ops import RunReport, TestRunnerOps

__all__ = ["RunReport", "TestRunnerOps"]
