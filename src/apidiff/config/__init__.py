"""Configuration module."""

from apidiff.config.loader import load_config
from apidiff.config.models import (
    BreakingChangeRules,
    ComparisonConfig,
    ExclusionConfig,
    FilterConfig,
    LoggingConfig,
    LogOutputConfig,
    MappingConfig,
)

__all__ = [
    "BreakingChangeRules",
    "ComparisonConfig",
    "ExclusionConfig",
    "FilterConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "MappingConfig",
    "load_config",
]
