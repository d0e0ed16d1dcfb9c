"""Cypress reporter output parsing."""

from testrunner_mcp.cypress.models import (
    CypressCodeFrame,
    CypressError,
    CypressResults,
    CypressStats,
    CypressTest,
)
from testrunner_mcp.cypress.pipeline import (
    PipelineOutcome,
    extract_json,
    filter_results,
    parse_results,
    process_output,
    serialize_results,
)

__all__ = [
    "CypressCodeFrame",
    "CypressError",
    "CypressResults",
    "CypressStats",
    "CypressTest",
    "PipelineOutcome",
    "extract_json",
    "filter_results",
    "parse_results",
    "process_output",
    "serialize_results",
]
