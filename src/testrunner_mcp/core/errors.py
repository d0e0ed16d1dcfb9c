"""Test runner error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Path validation
- 4xxx: Argument validation
- 5xxx: Execution
- 6xxx: Cypress output
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Path validation (3xxx)
    INVALID_CHARACTERS = 3001
    PATH_TRAVERSAL = 3002
    WRONG_FILE_KIND = 3003
    MALFORMED_PATH = 3004
    INVALID_LINE_NUMBER = 3005

    # Argument validation (4xxx)
    TOO_MANY_ARGUMENTS = 4001
    ARGUMENT_TOO_LONG = 4002
    DANGEROUS_CHARACTER = 4003
    DISALLOWED_FLAG = 4004
    MISSING_FLAG_VALUE = 4005
    INVALID_FLAG_VALUE = 4006

    # Execution (5xxx)
    SPAWN_FAILED = 5001

    # Cypress output (6xxx)
    CYPRESS_NO_JSON = 6001
    CYPRESS_PARSE_FAILED = 6002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class TestRunnerError(Exception):
    """Base error with structured context for MCP responses."""

    __test__ = False

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PATH_TRAVERSAL')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/MCP responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(TestRunnerError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class InputValidationError(TestRunnerError):
    """Caller-supplied input was rejected before anything was executed."""


class PathValidationError(InputValidationError):
    """A test file path or its line numbers failed validation."""

    @classmethod
    def invalid_characters(cls, path: str) -> "PathValidationError":
        return cls(
            code=ErrorCode.INVALID_CHARACTERS,
            message="File path contains invalid characters (null byte or newline)",
            details={"path": path},
        )

    @classmethod
    def traversal(cls, path: str) -> "PathValidationError":
        return cls(
            code=ErrorCode.PATH_TRAVERSAL,
            message=f"Path traversal is not allowed: {path}",
            details={"path": path},
        )

    @classmethod
    def wrong_kind(cls, path: str, suffixes: tuple[str, ...]) -> "PathValidationError":
        expected = " or ".join(f"'{s}'" for s in suffixes)
        return cls(
            code=ErrorCode.WRONG_FILE_KIND,
            message=f"File must end with {expected}: {path}",
            details={"path": path, "suffixes": list(suffixes)},
        )

    @classmethod
    def malformed(cls, path: str) -> "PathValidationError":
        return cls(
            code=ErrorCode.MALFORMED_PATH,
            message=f"File path has no name before its suffix: {path}",
            details={"path": path},
        )

    @classmethod
    def option_like(cls, path: str) -> "PathValidationError":
        return cls(
            code=ErrorCode.MALFORMED_PATH,
            message=f"File path must not start with '-': {path}",
            details={"path": path},
        )

    @classmethod
    def invalid_line_number(cls, value: int) -> "PathValidationError":
        return cls(
            code=ErrorCode.INVALID_LINE_NUMBER,
            message=f"Line numbers must be positive integers, got {value}",
            details={"line_number": value},
        )


class ArgumentValidationError(InputValidationError):
    """A raw argument list failed validation."""

    @classmethod
    def too_many_arguments(cls, count: int, limit: int) -> "ArgumentValidationError":
        return cls(
            code=ErrorCode.TOO_MANY_ARGUMENTS,
            message=f"Too many arguments: {count} (maximum {limit})",
            details={"count": count, "limit": limit},
        )

    @classmethod
    def too_long(cls, length: int, limit: int) -> "ArgumentValidationError":
        return cls(
            code=ErrorCode.ARGUMENT_TOO_LONG,
            message=f"Argument too long: {length} characters (maximum {limit})",
            details={"length": length, "limit": limit},
        )

    @classmethod
    def dangerous_character(cls, token: str, char: str) -> "ArgumentValidationError":
        return cls(
            code=ErrorCode.DANGEROUS_CHARACTER,
            message=f"Argument contains dangerous character '{char}': {token}",
            details={"argument": token, "character": char},
        )

    @classmethod
    def disallowed_flag(cls, flag: str) -> "ArgumentValidationError":
        return cls(
            code=ErrorCode.DISALLOWED_FLAG,
            message=f"Flag not allowed: {flag}",
            details={"flag": flag},
        )

    @classmethod
    def missing_value(cls, flag: str) -> "ArgumentValidationError":
        return cls(
            code=ErrorCode.MISSING_FLAG_VALUE,
            message=f"Flag {flag} requires a value",
            details={"flag": flag},
        )

    @classmethod
    def invalid_value(cls, flag: str, value: str, reason: str) -> "ArgumentValidationError":
        return cls(
            code=ErrorCode.INVALID_FLAG_VALUE,
            message=f"Invalid value for {flag}: {reason}",
            details={"flag": flag, "value": value, "reason": reason},
        )


class ExecutionError(TestRunnerError):
    """The test command could not be started."""

    @classmethod
    def spawn_failed(cls, program: str, reason: str) -> "ExecutionError":
        return cls(
            code=ErrorCode.SPAWN_FAILED,
            message=f"Failed to start '{program}': {reason}",
            details={"program": program, "reason": reason},
        )


class CypressOutputError(TestRunnerError):
    """A stage of the Cypress output pipeline failed.

    Never surfaced to callers as a failure; folded into a degraded report.
    """

    @property
    def stage(self) -> str:
        return str(self.details.get("stage", ""))

    @classmethod
    def no_json_found(cls) -> "CypressOutputError":
        return cls(
            code=ErrorCode.CYPRESS_NO_JSON,
            message="No JSON found in Cypress output",
            details={"stage": "extract", "reason": "no-json-found"},
        )

    @classmethod
    def parse_failed(cls, reason: str) -> "CypressOutputError":
        return cls(
            code=ErrorCode.CYPRESS_PARSE_FAILED,
            message=f"Failed to parse Cypress JSON: {reason}",
            details={"stage": "parse", "reason": reason},
        )


class InternalError(TestRunnerError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
