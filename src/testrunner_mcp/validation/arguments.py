"""Raw RSpec argument list validation.

Default-deny: every flag must be on the allowlist, every token is checked
for shell metacharacters and length, and flags that take a value have the
value checked against a per-flag rule. Any token that is not a flag must be
a spec file and goes through the path validator. A single bad token rejects
the whole list.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from testrunner_mcp.config.constants import MAX_ARGUMENT_LENGTH, MAX_ARGUMENTS
from testrunner_mcp.core.errors import ArgumentValidationError
from testrunner_mcp.validation.paths import FileKind, validate_file_path

DANGEROUS_CHARACTERS = frozenset(";&|$`()<>\"'")

OUTPUT_PATH_FLAGS = frozenset({"--out", "-o", "--deprecation-out"})
REQUIRE_PATH_FLAGS = frozenset({"--require", "-r"})
SEED_FLAGS = frozenset({"--seed"})

VALUE_FLAGS = frozenset(
    {
        *OUTPUT_PATH_FLAGS,
        *REQUIRE_PATH_FLAGS,
        *SEED_FLAGS,
        "--format",
        "-f",
        "--tag",
        "-t",
        "--example",
        "-e",
        "--pattern",
        "-P",
        "--order",
    }
)

OPTIONAL_NUMERIC_FLAGS = frozenset({"--profile", "-p"})

SWITCH_FLAGS = frozenset(
    {
        "--backtrace",
        "-b",
        "--color",
        "--no-color",
        "--dry-run",
        "--fail-fast",
        "--no-fail-fast",
        "--warnings",
        "-w",
        "--only-failures",
        "--next-failure",
    }
)

ALLOWED_FLAGS = VALUE_FLAGS | OPTIONAL_NUMERIC_FLAGS | SWITCH_FLAGS

ALLOWED_OUTPUT_DIRS = ("tmp/", "log/", "coverage/", "spec/reports/")

_REQUIRE_EXTENSION = ".rb"


def _is_flag(token: str) -> bool:
    return token.startswith("-")


def _is_non_negative_int(value: str) -> bool:
    return value.isascii() and value.isdigit()


def sanitize_token(token: str) -> None:
    """Reject tokens carrying shell metacharacters or excessive length."""
    for ch in token:
        if ch in DANGEROUS_CHARACTERS:
            raise ArgumentValidationError.dangerous_character(token, ch)
    if len(token) > MAX_ARGUMENT_LENGTH:
        raise ArgumentValidationError.too_long(len(token), MAX_ARGUMENT_LENGTH)


def _check_output_path(flag: str, value: str) -> None:
    if "../" in value:
        raise ArgumentValidationError.invalid_value(flag, value, "path traversal is not allowed")
    if value.startswith("/"):
        raise ArgumentValidationError.invalid_value(flag, value, "absolute paths are not allowed")
    if not value.startswith(ALLOWED_OUTPUT_DIRS):
        allowed = ", ".join(ALLOWED_OUTPUT_DIRS)
        raise ArgumentValidationError.invalid_value(
            flag, value, f"output must be written under one of: {allowed}"
        )


def _check_require_path(flag: str, value: str) -> None:
    if value.startswith("/"):
        raise ArgumentValidationError.invalid_value(flag, value, "absolute paths are not allowed")
    if "../" in value:
        raise ArgumentValidationError.invalid_value(flag, value, "path traversal is not allowed")
    if not value.endswith(_REQUIRE_EXTENSION):
        raise ArgumentValidationError.invalid_value(
            flag, value, f"required files must end with '{_REQUIRE_EXTENSION}'"
        )


def _check_seed(flag: str, value: str) -> None:
    if not _is_non_negative_int(value):
        raise ArgumentValidationError.invalid_value(
            flag, value, "seed must be a non-negative integer"
        )


_VALUE_CHECKS: dict[str, Callable[[str, str], None]] = {
    **dict.fromkeys(OUTPUT_PATH_FLAGS, _check_output_path),
    **dict.fromkeys(REQUIRE_PATH_FLAGS, _check_require_path),
    **dict.fromkeys(SEED_FLAGS, _check_seed),
}


def validate_arguments(tokens: Sequence[str]) -> None:
    """Validate a raw RSpec argument list.

    Raises:
        ArgumentValidationError: On the first disallowed flag or bad value.
        PathValidationError: When a bare token is not an acceptable spec file.
    """
    if len(tokens) > MAX_ARGUMENTS:
        raise ArgumentValidationError.too_many_arguments(len(tokens), MAX_ARGUMENTS)

    i = 0
    while i < len(tokens):
        token = tokens[i]
        sanitize_token(token)

        if not _is_flag(token):
            validate_file_path(token, FileKind.RSPEC)
            i += 1
            continue

        if token not in ALLOWED_FLAGS:
            raise ArgumentValidationError.disallowed_flag(token)

        if token in VALUE_FLAGS:
            if i + 1 >= len(tokens):
                raise ArgumentValidationError.missing_value(token)
            value = tokens[i + 1]
            sanitize_token(value)
            check = _VALUE_CHECKS.get(token)
            if check is not None:
                check(token, value)
            i += 2
            continue

        if token in OPTIONAL_NUMERIC_FLAGS and i + 1 < len(tokens):
            value = tokens[i + 1]
            if not _is_flag(value):
                sanitize_token(value)
                if not _is_non_negative_int(value):
                    raise ArgumentValidationError.invalid_value(
                        token, value, "profile count must be numeric"
                    )
                i += 2
                continue

        i += 1
