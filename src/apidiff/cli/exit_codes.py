"""Process exit codes for the apidiff CLI."""

from enum import IntEnum

from apidiff.compare.models import ComparisonResult
from apidiff.core.errors import (
    ApiDiffError,
    ComparisonError,
    ConfigError,
    ErrorCode,
    SurfaceLoadError,
)


class ExitCode(IntEnum):
    SUCCESS = 0
    BREAKING_CHANGES_DETECTED = 1
    COMPARISON_ERROR = 2
    SURFACE_LOAD_ERROR = 3
    CONFIGURATION_ERROR = 4
    INVALID_ARGUMENTS = 5
    FILE_NOT_FOUND = 6
    UNEXPECTED_ERROR = 99

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ExitCode.SUCCESS: "Comparison completed successfully with no breaking changes detected.",
    ExitCode.BREAKING_CHANGES_DETECTED: (
        "Comparison completed successfully but breaking changes were detected."
    ),
    ExitCode.COMPARISON_ERROR: "An error occurred during the comparison process.",
    ExitCode.SURFACE_LOAD_ERROR: "Failed to load one or more API surfaces for comparison.",
    ExitCode.CONFIGURATION_ERROR: "Configuration error or invalid settings detected.",
    ExitCode.INVALID_ARGUMENTS: "Invalid command line arguments provided.",
    ExitCode.FILE_NOT_FOUND: "One or more required files could not be found.",
    ExitCode.UNEXPECTED_ERROR: "An unexpected error occurred during execution.",
}

_NOT_FOUND_CODES = frozenset({ErrorCode.CONFIG_FILE_NOT_FOUND, ErrorCode.SURFACE_FILE_NOT_FOUND})


def exit_code_for_result(result: ComparisonResult, *, fail_on_breaking: bool = True) -> ExitCode:
    if fail_on_breaking and result.has_breaking_changes:
        return ExitCode.BREAKING_CHANGES_DETECTED
    return ExitCode.SUCCESS


def exit_code_for_error(error: BaseException) -> ExitCode:
    """Map an exception raised during a run to its exit code."""
    if isinstance(error, ApiDiffError):
        if error.code in _NOT_FOUND_CODES:
            return ExitCode.FILE_NOT_FOUND
        if isinstance(error, SurfaceLoadError):
            return ExitCode.SURFACE_LOAD_ERROR
        if isinstance(error, ConfigError):
            return ExitCode.CONFIGURATION_ERROR
        if isinstance(error, ComparisonError):
            return ExitCode.COMPARISON_ERROR
        return ExitCode.UNEXPECTED_ERROR
    if isinstance(error, (FileNotFoundError, NotADirectoryError)):
        return ExitCode.FILE_NOT_FOUND
    if isinstance(error, ValueError):
        return ExitCode.INVALID_ARGUMENTS
    return ExitCode.UNEXPECTED_ERROR
