"""Core module exports."""

from apidiff.core.errors import (
    ApiDiffError,
    ComparisonError,
    ConfigError,
    ErrorCode,
    InternalError,
    SurfaceLoadError,
)
from apidiff.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "ApiDiffError",
    "ComparisonError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "SurfaceLoadError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
