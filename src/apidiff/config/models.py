"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (APIDIFF__SECTION__KEY)
3. Comparison config file (JSON or YAML, passed with --config)
4. Global YAML (~/.config/apidiff/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    APIDIFF__<SECTION>__<KEY>=<VALUE>

Examples:
    APIDIFF__LOGGING__LEVEL=DEBUG
    APIDIFF__MAPPINGS__AUTO_MAP_SAME_NAME_TYPES=true
    APIDIFF__FILTERS__INCLUDE_NAMESPACES='["Contoso.Api"]'

Every section accepts both snake_case keys and the camelCase keys used by
existing JSON configuration files (``namespaceMappings``,
``excludedTypePatterns``, ``treatAddedTypeAsBreaking``...).
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
OutputFormat = Literal["console", "json", "markdown", "html"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        APIDIFF__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. INFO reports each comparison step, DEBUG every match decision.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class _SectionModel(BaseModel):
    """Base for comparison sections: camelCase aliases, snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _reject_blank(values: list[str], field_name: str) -> list[str]:
    if any(not v or not v.strip() for v in values):
        raise ValueError(f"{field_name} must not contain blank entries")
    return values


class FilterConfig(_SectionModel):
    """Which types of a surface take part in the comparison.

    Env vars:
        APIDIFF__FILTERS__INCLUDE_NAMESPACES: JSON list of namespace prefixes
        APIDIFF__FILTERS__INCLUDE_INTERNALS: Also compare non-public types
    """

    include_namespaces: list[str] = Field(
        default_factory=list,
        description="Namespace prefixes to keep (case-insensitive). Empty keeps everything.",
    )
    exclude_namespaces: list[str] = Field(
        default_factory=list,
        description="Namespace prefixes to drop (case-insensitive).",
    )
    include_types: list[str] = Field(
        default_factory=list,
        description="Wildcard patterns (* and ?) over full type names to keep.",
    )
    exclude_types: list[str] = Field(
        default_factory=list,
        description="Wildcard patterns (* and ?) over full type names to drop.",
    )
    include_internals: bool = Field(
        default=False,
        description="Compare types that are not visible outside the surface.",
    )
    include_compiler_generated: bool = Field(
        default=False,
        description="Keep types named like anonymous types or closure classes.",
    )

    @field_validator("include_namespaces", "exclude_namespaces", "include_types", "exclude_types")
    @classmethod
    def validate_entries(cls, v: list[str], info: object) -> list[str]:
        return _reject_blank(v, getattr(info, "field_name", "filters"))


class MappingConfig(_SectionModel):
    """Rename rules used to match types across versions.

    Env vars:
        APIDIFF__MAPPINGS__AUTO_MAP_SAME_NAME_TYPES: Match types by simple name
        APIDIFF__MAPPINGS__IGNORE_CASE: Case-insensitive name matching
    """

    namespace_mappings: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Old namespace -> one or more new namespaces. Prefixes carry sub-namespaces.",
    )
    type_mappings: dict[str, str] = Field(
        default_factory=dict,
        description="Old type name (full or simple) -> new type name.",
    )
    auto_map_same_name_types: bool = Field(
        default=False,
        description="Last resort: match types whose simple names agree. "
        "RISK: unrelated types sharing a name will be compared.",
    )
    ignore_case: bool = Field(
        default=False,
        description="Apply case-insensitive matching to every mapping rule.",
    )

    @model_validator(mode="after")
    def validate_mappings(self) -> "MappingConfig":
        for source, targets in self.namespace_mappings.items():
            if not source.strip():
                raise ValueError("namespace_mappings must not contain blank keys")
            if not targets:
                raise ValueError(f"namespace mapping for '{source}' has no targets")
            _reject_blank(targets, f"namespace_mappings[{source}]")
        for source, target in self.type_mappings.items():
            if not source.strip() or not target.strip():
                raise ValueError("type_mappings must not contain blank keys or values")
        if self._has_circular_namespace_mappings():
            raise ValueError("namespace_mappings contain a circular reference")
        return self

    def _has_circular_namespace_mappings(self) -> bool:
        visited: set[str] = set()
        on_stack: set[str] = set()

        def visit(current: str) -> bool:
            visited.add(current)
            on_stack.add(current)
            for target in self.namespace_mappings.get(current, []):
                if target in on_stack:
                    return True
                if target in self.namespace_mappings and target not in visited and visit(target):
                    return True
            on_stack.discard(current)
            return False

        return any(source not in visited and visit(source) for source in self.namespace_mappings)


class ExclusionConfig(_SectionModel):
    """Differences that are reported as Excluded instead of being classified."""

    excluded_types: list[str] = Field(default_factory=list)
    excluded_members: list[str] = Field(default_factory=list)
    excluded_type_patterns: list[str] = Field(
        default_factory=list,
        description="Wildcard patterns (* and ?) over full type names, case-insensitive.",
    )
    excluded_member_patterns: list[str] = Field(
        default_factory=list,
        description="Wildcard patterns (* and ?) over full member names, case-insensitive.",
    )

    @field_validator(
        "excluded_types", "excluded_members", "excluded_type_patterns", "excluded_member_patterns"
    )
    @classmethod
    def validate_entries(cls, v: list[str], info: object) -> list[str]:
        return _reject_blank(v, getattr(info, "field_name", "exclusions"))


class BreakingChangeRules(_SectionModel):
    """Per-change-kind breaking policy.

    Only removal, signature-change and addition rules drive classification;
    the remaining flags are accepted so existing configuration files load.
    """

    treat_type_removal_as_breaking: bool = True
    treat_member_removal_as_breaking: bool = True
    treat_signature_change_as_breaking: bool = True
    treat_reduced_accessibility_as_breaking: bool = True
    treat_added_type_as_breaking: bool = False
    treat_added_member_as_breaking: bool = False
    treat_added_interface_as_breaking: bool = False
    treat_removed_interface_as_breaking: bool = True
    treat_parameter_name_change_as_breaking: bool = False
    treat_added_optional_parameter_as_breaking: bool = False


class ComparisonConfig(_SectionModel):
    """Root configuration for one comparison run.

    All settings can be configured via:
    1. Environment variables: APIDIFF__SECTION__KEY
    2. A JSON or YAML config file
    3. Direct kwargs to load_config()
    """

    filters: FilterConfig = Field(default_factory=FilterConfig)
    mappings: MappingConfig = Field(default_factory=MappingConfig)
    exclusions: ExclusionConfig = Field(default_factory=ExclusionConfig)
    breaking_change_rules: BreakingChangeRules = Field(default_factory=BreakingChangeRules)
    output_format: OutputFormat = "console"
    output_path: str | None = None
    fail_on_breaking_changes: bool = Field(
        default=True,
        description="Exit with code 1 when breaking changes are detected.",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
