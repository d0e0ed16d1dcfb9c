"""Tests for the Cypress output pipeline."""

from __future__ import annotations

import json
from typing import Any

import pytest

from testrunner_mcp.core.errors import CypressOutputError, ErrorCode
from testrunner_mcp.cypress.models import CypressResults
from testrunner_mcp.cypress.pipeline import (
    extract_json,
    filter_results,
    parse_results,
    process_output,
    serialize_results,
)


class TestExtractJson:
    def test_skips_noise_before_first_brace(self, noisy_stdout: str) -> None:
        result = extract_json(noisy_stdout)

        assert result.startswith("{")
        assert '"stats"' in result

    def test_clean_output_unchanged(self, report_json: str) -> None:
        assert extract_json(report_json) == report_json

    def test_no_brace_raises(self) -> None:
        with pytest.raises(CypressOutputError) as exc_info:
            extract_json("Some output without JSON")

        assert exc_info.value.message == "No JSON found in Cypress output"
        assert exc_info.value.stage == "extract"

    def test_minimal_document_after_noise(self) -> None:
        assert extract_json('noise\n{"a":1}') == '{"a":1}'

    def test_brace_in_noise_is_taken_as_start(self) -> None:
        assert extract_json("warn {x} then") == "{x} then"


class TestParseResults:
    def test_parses_full_document(self, report_json: str) -> None:
        results = parse_results(report_json)

        assert results.stats.suites == 1
        assert results.stats.tests == 2
        assert len(results.tests) == 2
        assert results.tests[0].title == "rejects bad password"
        assert results.tests[0].full_title == "Login rejects bad password"
        assert results.tests[0].err is not None
        assert results.tests[0].err.code_frame is not None
        assert results.tests[0].err.code_frame.original_file == "test.cy.js"

    def test_empty_err_object_means_no_error(self, report_json: str) -> None:
        results = parse_results(report_json)

        assert results.passes[0].err is None

    def test_null_code_frame_allowed(
        self, report: dict[str, Any], failing_error: dict[str, Any]
    ) -> None:
        failing_error["codeFrame"] = None
        report["failures"][0]["err"] = failing_error

        results = parse_results(json.dumps(report))

        assert results.failures[0].err is not None
        assert results.failures[0].err.code_frame is None

    def test_missing_stats_fields_fail(self) -> None:
        partial = '{"stats": {"suites": 1, "tests": 1, "passes": 0, "pending": 0, "failures": 1}}'

        with pytest.raises(CypressOutputError) as exc_info:
            parse_results(partial)

        assert exc_info.value.code == ErrorCode.CYPRESS_PARSE_FAILED
        assert exc_info.value.stage == "parse"

    def test_truncated_json_fails(self, report_json: str) -> None:
        with pytest.raises(CypressOutputError):
            parse_results(report_json[: len(report_json) // 2])

    def test_trailing_output_fails(self, report_json: str) -> None:
        with pytest.raises(CypressOutputError):
            parse_results(report_json + "\nDone running.\n")


class TestFilterAndSerialize:
    def test_filter_keeps_every_field(self, report_json: str) -> None:
        results = parse_results(report_json)

        assert filter_results(results) == results

    def test_serialize_uses_reporter_field_names(self, report_json: str) -> None:
        text = serialize_results(parse_results(report_json))
        data = json.loads(text)

        assert data["tests"][0]["fullTitle"] == "Login rejects bad password"
        assert data["tests"][0]["currentRetry"] == 0
        assert data["failures"][0]["err"]["codeFrame"]["relativeFile"] == "test.cy.js"
        assert data["passes"][0]["err"] is None
        assert "\n  " in text

    def test_serialized_output_parses_back(self, report_json: str) -> None:
        results = parse_results(report_json)

        assert CypressResults.model_validate_json(serialize_results(results)) == results


class TestProcessOutput:
    def test_success(self, noisy_stdout: str) -> None:
        outcome = process_output(noisy_stdout)

        assert outcome.ok
        assert outcome.failed_stage is None
        assert outcome.results is not None
        assert outcome.results.stats.failures == 1
        assert outcome.results_json is not None

    def test_no_json_degrades(self) -> None:
        outcome = process_output("Cypress could not verify that this server is running")

        assert not outcome.ok
        assert outcome.failed_stage == "extract"
        assert outcome.results_json is None

    def test_bad_json_degrades(self) -> None:
        outcome = process_output("noise {not json")

        assert outcome.failed_stage == "parse"
        assert outcome.reason is not None
        assert outcome.reason.startswith("Failed to parse Cypress JSON: ")
