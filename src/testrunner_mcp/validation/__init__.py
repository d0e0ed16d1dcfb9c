"""Input validation for everything a caller can put on a command line."""

from testrunner_mcp.validation.arguments import ALLOWED_FLAGS, sanitize_token, validate_arguments
from testrunner_mcp.validation.paths import (
    FileKind,
    ValidatedFileTarget,
    build_file_target,
    normalize_to_working_directory,
    validate_file_path,
    validate_line_numbers,
)

__all__ = [
    "ALLOWED_FLAGS",
    "FileKind",
    "ValidatedFileTarget",
    "build_file_target",
    "normalize_to_working_directory",
    "sanitize_token",
    "validate_arguments",
    "validate_file_path",
    "validate_line_numbers",
]
