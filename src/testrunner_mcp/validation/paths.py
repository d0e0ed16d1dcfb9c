"""Test file path validation.

Pure string checks, no filesystem access. Whether a validated path exists is
the test runner's concern. Checks run in a fixed order and the first
violation wins:

1. NUL byte or newline            -> INVALID_CHARACTERS
2. "../" anywhere in the raw path -> PATH_TRAVERSAL
3. one leading "./" is ignored for the remaining checks
4. wrong suffix for the file kind -> WRONG_FILE_KIND
5. nothing but the suffix         -> MALFORMED_PATH
6. leading "-" after step 3      -> MALFORMED_PATH
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from testrunner_mcp.config.constants import CURRENT_DIRECTORY
from testrunner_mcp.core.errors import PathValidationError


class FileKind(StrEnum):
    """Kinds of test files the server will hand to a runner."""

    RSPEC = "rspec"
    CYPRESS = "cypress"

    @property
    def suffixes(self) -> tuple[str, ...]:
        return _SUFFIXES[self]


_SUFFIXES: dict[FileKind, tuple[str, ...]] = {
    FileKind.RSPEC: ("_spec.rb",),
    FileKind.CYPRESS: (".cy.js", ".cy.ts"),
}

_FORBIDDEN_CHARACTERS = ("\0", "\n")
_TRAVERSAL = "../"
_CURRENT_DIR_PREFIX = "./"
_OPTION_PREFIX = "-"


@dataclass(frozen=True)
class ValidatedFileTarget:
    """A test file plus optional line filters, safe to append to a command."""

    file_path: str
    line_numbers: tuple[int, ...] = ()

    @property
    def argument(self) -> str:
        """Runner argument: ``path`` or ``path:line1:line2``."""
        if not self.line_numbers:
            return self.file_path
        return ":".join([self.file_path, *(str(n) for n in self.line_numbers)])


def _strip_current_dir(path: str) -> str:
    return path[len(_CURRENT_DIR_PREFIX) :] if path.startswith(_CURRENT_DIR_PREFIX) else path


def validate_file_path(path: str, kind: FileKind) -> None:
    """Validate a test file path for the given kind.

    Raises:
        PathValidationError: On the first rule the path violates.
    """
    if any(ch in path for ch in _FORBIDDEN_CHARACTERS):
        raise PathValidationError.invalid_characters(path)

    if _TRAVERSAL in path:
        raise PathValidationError.traversal(path)

    candidate = _strip_current_dir(path)

    if not candidate.endswith(kind.suffixes):
        raise PathValidationError.wrong_kind(path, kind.suffixes)

    if candidate in kind.suffixes:
        raise PathValidationError.malformed(path)

    if candidate.startswith(_OPTION_PREFIX):
        raise PathValidationError.option_like(path)


def validate_line_numbers(line_numbers: Sequence[int]) -> None:
    """Require every line number to be a positive integer.

    Raises:
        PathValidationError: Naming the first non-positive value.
    """
    for line in line_numbers:
        if line <= 0:
            raise PathValidationError.invalid_line_number(line)


def build_file_target(
    path: str,
    line_numbers: Sequence[int] | None,
    kind: FileKind,
) -> ValidatedFileTarget:
    """Validate a path and its line numbers, returning an immutable target."""
    validate_file_path(path, kind)
    lines = tuple(line_numbers or ())
    validate_line_numbers(lines)
    return ValidatedFileTarget(file_path=path, line_numbers=lines)


def normalize_to_working_directory(path: str, working_directory: str) -> str:
    """Rewrite a project-relative path to be relative to ``working_directory``.

    Callers address files from the project root (``cypress/cypress/e2e/t.cy.js``)
    while a runner started inside ``cypress/`` expects ``cypress/e2e/t.cy.js``.
    Paths outside the working directory are returned unchanged.
    """
    if working_directory == CURRENT_DIRECTORY:
        return path

    prefix = working_directory.rstrip("/") + "/"
    candidate = _strip_current_dir(path)
    if candidate.startswith(prefix):
        return candidate[len(prefix) :]
    return path
