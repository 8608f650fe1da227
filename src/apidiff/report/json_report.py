"""JSON report: camelCase keys, differences grouped by change type."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from apidiff.compare.models import ApiDifference, ChangeType, ComparisonResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JsonDifference(_CamelModel):
    change_type: str
    element_type: str
    element_name: str
    description: str
    is_breaking_change: bool
    severity: str
    old_signature: str | None = None
    new_signature: str | None = None
    details: list[str] | None = None

    @classmethod
    def from_difference(cls, difference: ApiDifference) -> JsonDifference:
        return cls(
            change_type=difference.change_type.value,
            element_type=difference.element_kind.value,
            element_name=difference.element_name,
            description=difference.description,
            is_breaking_change=difference.is_breaking_change,
            severity=difference.severity.value,
            old_signature=difference.old_signature,
            new_signature=difference.new_signature,
            details=list(difference.details) or None,
        )


class JsonMetadata(_CamelModel):
    baseline: str
    baseline_location: str
    candidate: str
    candidate_location: str
    comparison_timestamp: datetime
    has_breaking_changes: bool
    total_differences: int


class JsonSummary(_CamelModel):
    added_count: int
    removed_count: int
    modified_count: int
    breaking_changes_count: int
    total_changes: int


class JsonReport(_CamelModel):
    metadata: JsonMetadata
    summary: JsonSummary
    added: list[JsonDifference] = Field(default_factory=list)
    removed: list[JsonDifference] = Field(default_factory=list)
    modified: list[JsonDifference] = Field(default_factory=list)
    excluded: list[JsonDifference] = Field(default_factory=list)
    moved: list[JsonDifference] = Field(default_factory=list)
    breaking_changes: list[JsonDifference] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ComparisonResult) -> JsonReport:
        def convert(change_type: ChangeType) -> list[JsonDifference]:
            return [JsonDifference.from_difference(d) for d in result.differences_of(change_type)]

        summary = result.summary
        return cls(
            metadata=JsonMetadata(
                baseline=result.baseline_name,
                baseline_location=result.baseline_location,
                candidate=result.candidate_name,
                candidate_location=result.candidate_location,
                comparison_timestamp=result.timestamp,
                has_breaking_changes=result.has_breaking_changes,
                total_differences=result.total_differences,
            ),
            summary=JsonSummary(
                added_count=summary.added_count,
                removed_count=summary.removed_count,
                modified_count=summary.modified_count,
                breaking_changes_count=summary.breaking_changes_count,
                total_changes=summary.total_changes,
            ),
            added=convert(ChangeType.ADDED),
            removed=convert(ChangeType.REMOVED),
            modified=convert(ChangeType.MODIFIED),
            excluded=convert(ChangeType.EXCLUDED),
            moved=convert(ChangeType.MOVED),
            breaking_changes=[JsonDifference.from_difference(d) for d in result.breaking_changes],
        )


class JsonFormatter:
    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def format(self, result: ComparisonResult) -> str:
        report = JsonReport.from_result(result)
        return report.model_dump_json(by_alias=True, exclude_none=True, indent=self.indent)
