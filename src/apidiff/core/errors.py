"""apidiff error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Surface loading
- 4xxx: Comparison
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
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Surface (3xxx)
    SURFACE_FILE_NOT_FOUND = 3001
    SURFACE_PARSE_ERROR = 3002
    SURFACE_INVALID_DOCUMENT = 3003
    SURFACE_PARTIAL_LOAD = 3004

    # Comparison (4xxx)
    COMPARISON_FAILED = 4001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class ApiDiffError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON reports."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ApiDiffError):
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

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class SurfaceLoadError(ApiDiffError):
    """A surface document could not be loaded, fully or partially.

    ``loaded_types`` holds whatever type descriptors were read successfully
    before the failure, so callers may continue with a partial surface.
    """

    @property
    def loaded_types(self) -> tuple[Any, ...]:
        return tuple(self.details.get("loaded_types", ()))

    def to_dict(self) -> dict[str, Any]:
        result = ApiDiffError.to_dict(self)
        result["details"] = {k: v for k, v in self.details.items() if k != "loaded_types"}
        return result

    @classmethod
    def file_not_found(cls, path: str) -> "SurfaceLoadError":
        return cls(
            code=ErrorCode.SURFACE_FILE_NOT_FOUND,
            message=f"Surface file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "SurfaceLoadError":
        return cls(
            code=ErrorCode.SURFACE_PARSE_ERROR,
            message=f"Failed to parse surface at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_document(cls, path: str, reason: str) -> "SurfaceLoadError":
        return cls(
            code=ErrorCode.SURFACE_INVALID_DOCUMENT,
            message=f"Invalid surface document {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def partial_load(
        cls, surface: str, failures: list[str], loaded_types: tuple[Any, ...]
    ) -> "SurfaceLoadError":
        return cls(
            code=ErrorCode.SURFACE_PARTIAL_LOAD,
            message=f"{len(failures)} type(s) in {surface} could not be loaded",
            details={"surface": surface, "failures": failures, "loaded_types": loaded_types},
        )


class ComparisonError(ApiDiffError):
    """Errors raised while comparing two surfaces."""

    @classmethod
    def failed(cls, baseline: str, candidate: str, reason: str) -> "ComparisonError":
        return cls(
            code=ErrorCode.COMPARISON_FAILED,
            message=f"Comparison of {baseline} and {candidate} failed: {reason}",
            details={"baseline": baseline, "candidate": candidate, "reason": reason},
        )


class InternalError(ApiDiffError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
