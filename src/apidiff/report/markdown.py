"""Markdown report for pull requests and release notes."""

from __future__ import annotations

from apidiff.compare.models import ApiDifference, ComparisonResult, Severity
from apidiff.report.base import (
    SECTIONS,
    TIMESTAMP_FORMAT,
    display_name,
    group_by_element_kind,
    sorted_breaking_changes,
)


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


class MarkdownFormatter:
    def format(self, result: ComparisonResult) -> str:
        lines: list[str] = ["# API Comparison Report", ""]
        self._metadata(lines, result)
        self._summary(lines, result)
        if result.has_breaking_changes:
            self._breaking_changes(lines, result)

        for change_type, title in SECTIONS:
            items = result.differences_of(change_type)
            if not items:
                continue
            lines.extend([f"## {title} ({len(items)})", ""])
            if title.startswith("Excluded"):
                lines.extend(
                    ["The following items were intentionally excluded from the comparison:", ""]
                )
            self._change_group(lines, items)

        return "\n".join(lines) + "\n"

    def _metadata(self, lines: list[str], result: ComparisonResult) -> None:
        baseline = display_name(result.baseline_name, result.baseline_location)
        candidate = display_name(result.candidate_name, result.candidate_location)
        lines.extend(
            [
                "## Metadata",
                "",
                "| Property | Value |",
                "|----------|-------|",
                f"| Baseline | `{baseline}` |",
                f"| Candidate | `{candidate}` |",
                f"| Comparison Date | {result.timestamp.strftime(TIMESTAMP_FORMAT)} |",
                f"| Total Differences | {result.total_differences} |",
            ]
        )
        if result.has_breaking_changes:
            lines.append(f"| Breaking Changes | **{len(result.breaking_changes)}** |")
        lines.append("")

    def _summary(self, lines: list[str], result: ComparisonResult) -> None:
        summary = result.summary
        lines.extend(
            [
                "## Summary",
                "",
                "| Change Type | Count |",
                "|-------------|-------|",
                f"| Added | {summary.added_count} |",
                f"| Removed | {summary.removed_count} |",
                f"| Modified | {summary.modified_count} |",
                f"| Breaking Changes | {summary.breaking_changes_count} |",
                f"| **Total Changes** | **{summary.total_changes}** |",
                "",
            ]
        )

    def _breaking_changes(self, lines: list[str], result: ComparisonResult) -> None:
        lines.extend(
            [
                "## Breaking Changes",
                "",
                "The following changes may break compatibility with existing code:",
                "",
                "| Type | Element | Description | Severity |",
                "|------|---------|-------------|----------|",
            ]
        )
        for change in sorted_breaking_changes(result):
            severity = change.severity.value
            if change.severity is Severity.CRITICAL:
                severity = f"**{severity}**"
            lines.append(
                f"| {change.element_kind.value} | `{change.element_name}` "
                f"| {_cell(change.description)} | {severity} |"
            )
        lines.append("")

    def _change_group(self, lines: list[str], changes: list[ApiDifference]) -> None:
        for kind, group in group_by_element_kind(changes):
            lines.extend(
                [
                    f"### {kind}",
                    "",
                    "| Element | Description | Breaking |",
                    "|---------|-------------|----------|",
                ]
            )
            for change in group:
                breaking = "Yes" if change.is_breaking_change else "No"
                lines.append(
                    f"| `{change.element_name}` | {_cell(change.description)} | {breaking} |"
                )
                if change.old_signature or change.new_signature:
                    lines.extend(self._signature_details(change))
            lines.append("")

    @staticmethod
    def _signature_details(change: ApiDifference) -> list[str]:
        block = ["", "<details>", "<summary>Signature Details</summary>", ""]
        if change.old_signature:
            block.extend(["**Old:**", "```csharp", change.old_signature, "```"])
        if change.new_signature:
            block.extend(["**New:**", "```csharp", change.new_signature, "```"])
        block.append("</details>")
        return block
