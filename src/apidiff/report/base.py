"""Shared pieces of the report formatters."""

from __future__ import annotations

from pathlib import PurePath
from typing import Protocol, runtime_checkable

from apidiff.compare.models import ApiDifference, ChangeType, ComparisonResult, Severity

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Section order for the per-change-type listings.
SECTIONS: tuple[tuple[ChangeType, str], ...] = (
    (ChangeType.ADDED, "Added Items"),
    (ChangeType.REMOVED, "Removed Items"),
    (ChangeType.MODIFIED, "Modified Items"),
    (ChangeType.MOVED, "Moved Items"),
    (ChangeType.EXCLUDED, "Excluded/Unsupported Items"),
)

_SEVERITY_ORDER = {s: i for i, s in enumerate(Severity)}


@runtime_checkable
class ReportFormatter(Protocol):
    """Renders a ``ComparisonResult`` as text."""

    def format(self, result: ComparisonResult) -> str: ...


def display_name(name: str, location: str) -> str:
    """File name of ``location``, or ``name`` when no location is known."""
    if location:
        return PurePath(location).name or name
    return name


def sorted_breaking_changes(result: ComparisonResult) -> list[ApiDifference]:
    """Breaking changes ordered by severity, element kind, then name."""
    return sorted(
        result.breaking_changes,
        key=lambda d: (_SEVERITY_ORDER[d.severity], d.element_kind.value, d.element_name),
    )


def group_by_element_kind(
    differences: list[ApiDifference],
) -> list[tuple[str, list[ApiDifference]]]:
    """Group by element kind name (alphabetical), each group sorted by name."""
    groups: dict[str, list[ApiDifference]] = {}
    for diff in differences:
        groups.setdefault(diff.element_kind.value, []).append(diff)
    return [
        (kind, sorted(groups[kind], key=lambda d: d.element_name)) for kind in sorted(groups)
    ]
