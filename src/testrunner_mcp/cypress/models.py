"""Cypress JSON reporter models.

Mirror the Mocha ``json`` reporter schema that ``cypress run --reporter json``
prints. Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _CypressModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CypressStats(_CypressModel):
    suites: int
    tests: int
    passes: int
    pending: int
    failures: int
    start: str
    end: str
    duration: int


class CypressCodeFrame(_CypressModel):
    """Source location and snippet attached to a failing assertion."""

    line: int
    column: int
    original_file: str = Field(alias="originalFile")
    relative_file: str = Field(alias="relativeFile")
    absolute_file: str = Field(alias="absoluteFile")
    frame: str
    language: str


class CypressError(_CypressModel):
    message: str
    name: str
    code_frame: CypressCodeFrame | None = Field(default=None, alias="codeFrame")


class CypressTest(_CypressModel):
    """A single test record. Appears in tests and in one of passes/pending/failures."""

    __test__ = False

    title: str
    full_title: str = Field(alias="fullTitle")
    file: str | None = None
    duration: int | None = None
    current_retry: int = Field(alias="currentRetry")
    err: CypressError | None = None

    @field_validator("err", mode="before")
    @classmethod
    def empty_err_is_none(cls, v: Any) -> Any:
        # The reporter writes "err": {} for tests that did not fail
        if isinstance(v, dict) and not v:
            return None
        return v


class CypressResults(_CypressModel):
    stats: CypressStats
    tests: list[CypressTest]
    pending: list[CypressTest]
    failures: list[CypressTest]
    passes: list[CypressTest]
