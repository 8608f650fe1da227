"""Terminal report built from rich tables and panels."""

from __future__ import annotations

import io

from rich.console import Console, Group, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from apidiff.compare.models import ApiDifference, ChangeType, ComparisonResult, Severity
from apidiff.report.base import SECTIONS, TIMESTAMP_FORMAT, display_name, sorted_breaking_changes

_SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}

_SECTION_STYLES = {
    ChangeType.ADDED: "green",
    ChangeType.REMOVED: "red",
    ChangeType.MODIFIED: "yellow",
    ChangeType.MOVED: "magenta",
    ChangeType.EXCLUDED: "dim",
}


class ConsoleFormatter:
    """Renders a result for a terminal.

    ``color=False`` yields plain text (tables keep their box drawing).
    """

    def __init__(self, *, color: bool = True, width: int = 120) -> None:
        self.color = color
        self.width = width

    def format(self, result: ComparisonResult) -> str:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=self.width,
            force_terminal=self.color,
            no_color=not self.color,
            highlight=False,
        )
        for renderable in self.renderables(result):
            console.print(renderable)
            console.print()
        return buffer.getvalue()

    def renderables(self, result: ComparisonResult) -> list[RenderableType]:
        items: list[RenderableType] = [self._header(result), self._summary(result)]
        if result.has_breaking_changes:
            items.append(self._breaking_changes(result))
        for change_type, title in SECTIONS:
            changes = result.differences_of(change_type)
            if changes:
                items.append(self._section(change_type, title, changes))
        if not result.differences:
            items.append(Text("No API differences found.", style="green"))
        return items

    def _header(self, result: ComparisonResult) -> Table:
        table = Table(title="API Comparison Report", title_style="bold")
        table.add_column("Property")
        table.add_column("Value", justify="right")
        table.add_row(
            "Baseline", escape(display_name(result.baseline_name, result.baseline_location))
        )
        table.add_row(
            "Candidate", escape(display_name(result.candidate_name, result.candidate_location))
        )
        table.add_row("Comparison Date", result.timestamp.strftime(TIMESTAMP_FORMAT))
        table.add_row("Total Differences", str(result.total_differences))
        if result.has_breaking_changes:
            table.add_row(
                "[bold red]Breaking Changes[/bold red]",
                f"[bold red]{len(result.breaking_changes)}[/bold red]",
            )
        return table

    def _summary(self, result: ComparisonResult) -> Panel:
        summary = result.summary
        body = Group(
            Text.from_markup(f"Added: [green]{summary.added_count}[/green]"),
            Text.from_markup(f"Removed: [red]{summary.removed_count}[/red]"),
            Text.from_markup(f"Modified: [yellow]{summary.modified_count}[/yellow]"),
            Text.from_markup(
                f"Breaking Changes: [bold red]{summary.breaking_changes_count}[/bold red]"
            ),
            Text(""),
            Text.from_markup(f"Total Changes: [blue]{summary.total_changes}[/blue]"),
        )
        return Panel(body, title="Summary", expand=True)

    def _breaking_changes(self, result: ComparisonResult) -> Table:
        table = Table(title="[bold red]Breaking Changes[/bold red]")
        table.add_column("Type")
        table.add_column("Element", overflow="fold")
        table.add_column("Description", overflow="fold")
        table.add_column("Severity")
        for change in sorted_breaking_changes(result):
            style = _SEVERITY_STYLES[change.severity]
            table.add_row(
                change.element_kind.value,
                escape(change.element_name),
                escape(change.description),
                f"[{style}]{change.severity.value}[/{style}]",
            )
        return table

    def _section(self, change_type: ChangeType, title: str, changes: list[ApiDifference]) -> Table:
        style = _SECTION_STYLES[change_type]
        table = Table(title=f"[{style}]{title} ({len(changes)})[/{style}]", show_lines=True)
        table.add_column("Type")
        table.add_column("Element", overflow="fold")
        table.add_column("Description", overflow="fold")
        table.add_column("Signature", overflow="fold")
        for change in sorted(changes, key=lambda d: (d.element_kind.value, d.element_name)):
            table.add_row(
                change.element_kind.value,
                escape(change.element_name),
                escape(change.description),
                self._signature_cell(change),
            )
        return table

    @staticmethod
    def _signature_cell(change: ApiDifference) -> Text:
        cell = Text()
        if change.old_signature:
            cell.append(f"- {change.old_signature}", style="red")
        if change.new_signature:
            if cell.plain:
                cell.append("\n")
            cell.append(f"+ {change.new_signature}", style="green")
        return cell
