"""Cypress output post-processing.

Cypress prints browser and dbus warnings before the reporter's JSON, so the
report is recovered in four stages:

1. extract   - take everything from the first ``{``
2. parse     - validate into ``CypressResults``
3. filter    - re-project each test record (currently keeps every field)
4. serialize - pretty-print for the caller

``process_output`` runs all four and never raises: a failed stage is
recorded on the outcome so the caller can fall back to the raw output.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from pydantic import ValidationError

from testrunner_mcp.core.errors import CypressOutputError
from testrunner_mcp.cypress.models import (
    CypressCodeFrame,
    CypressError,
    CypressResults,
    CypressTest,
)

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PipelineOutcome:
    """Result of running stdout through the pipeline."""

    results: CypressResults | None = None
    results_json: str | None = None
    error: CypressOutputError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed_stage(self) -> str | None:
        return self.error.stage if self.error else None

    @property
    def reason(self) -> str | None:
        return self.error.message if self.error else None


def extract_json(output: str) -> str:
    """Return ``output`` from its first opening brace onwards.

    Raises:
        CypressOutputError: If the output contains no ``{`` at all.
    """
    start = output.find("{")
    if start == -1:
        raise CypressOutputError.no_json_found()
    return output[start:]


def parse_results(json_str: str) -> CypressResults:
    """Parse reporter JSON into typed results.

    Raises:
        CypressOutputError: On malformed JSON or a schema mismatch.
    """
    try:
        return CypressResults.model_validate_json(json_str)
    except ValidationError as e:
        raise CypressOutputError.parse_failed(_first_error(e)) from e


def _first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    err = errors[0]
    loc = ".".join(str(part) for part in err["loc"])
    return f"{err['msg']} at {loc}" if loc else err["msg"]


def _filter_code_frame(frame: CypressCodeFrame) -> CypressCodeFrame:
    return CypressCodeFrame(
        line=frame.line,
        column=frame.column,
        original_file=frame.original_file,
        relative_file=frame.relative_file,
        absolute_file=frame.absolute_file,
        frame=frame.frame,
        language=frame.language,
    )


def _filter_error(err: CypressError) -> CypressError:
    return CypressError(
        message=err.message,
        name=err.name,
        code_frame=_filter_code_frame(err.code_frame) if err.code_frame else None,
    )


def _filter_test(test: CypressTest) -> CypressTest:
    return CypressTest(
        title=test.title,
        full_title=test.full_title,
        file=test.file,
        duration=test.duration,
        current_retry=test.current_retry,
        err=_filter_error(test.err) if test.err else None,
    )


def filter_results(results: CypressResults) -> CypressResults:
    """Project every test record onto the fields returned to callers.

    The projection keeps the full record today; narrowing it is done here.
    """
    return CypressResults(
        stats=results.stats,
        tests=[_filter_test(t) for t in results.tests],
        pending=[_filter_test(t) for t in results.pending],
        failures=[_filter_test(t) for t in results.failures],
        passes=[_filter_test(t) for t in results.passes],
    )


def serialize_results(results: CypressResults) -> str:
    """Pretty-print results using the reporter's camelCase field names."""
    return results.model_dump_json(by_alias=True, indent=2)


def process_output(stdout: str) -> PipelineOutcome:
    """Run extract, parse, filter and serialize, degrading instead of raising."""
    try:
        results = filter_results(parse_results(extract_json(stdout)))
    except CypressOutputError as e:
        log.warning(
            "cypress_output_degraded",
            stage=e.stage,
            error=e.message,
            stdout_bytes=len(stdout),
        )
        return PipelineOutcome(error=e)

    return PipelineOutcome(results=results, results_json=serialize_results(results))
