"""Tests for report/console.py module."""

from __future__ import annotations

import pytest
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from apidiff.compare.models import ApiDifference, ChangeType, ComparisonResult, ElementKind
from apidiff.report.console import ConsoleFormatter


class TestConsoleFormatter:
    """ConsoleFormatter tests."""

    def test_given_mixed_result_when_rendered_then_header_summary_and_sections(
        self, mixed_result: ComparisonResult
    ) -> None:
        """Header table, summary panel, breaking table, then one table per section."""
        # When
        items = ConsoleFormatter().renderables(mixed_result)

        # Then
        assert isinstance(items[0], Table) and items[0].title == "API Comparison Report"
        assert isinstance(items[1], Panel)
        titles = [str(item.title) for item in items[2:] if isinstance(item, Table)]
        assert titles == [
            "[bold red]Breaking Changes[/bold red]",
            "[green]Added Items (1)[/green]",
            "[red]Removed Items (1)[/red]",
            "[yellow]Modified Items (1)[/yellow]",
            "[dim]Excluded/Unsupported Items (1)[/dim]",
        ]

    def test_given_no_color_when_formatted_then_plain_text(
        self, mixed_result: ComparisonResult
    ) -> None:
        """Without color no ANSI escapes are emitted."""
        # When
        text = ConsoleFormatter(color=False).format(mixed_result)

        # Then
        assert "\x1b[" not in text
        assert "API Comparison Report" in text
        assert "Contoso.Api.dll" in text
        assert "2024-05-01 12:30:00" in text
        assert "Breaking Changes" in text
        assert "- public class Foo" in text
        assert "+ public sealed class Foo" in text

    def test_given_color_when_formatted_then_ansi_styles(
        self, mixed_result: ComparisonResult, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Color output carries terminal escapes."""
        monkeypatch.setenv("TERM", "xterm-256color")
        monkeypatch.delenv("NO_COLOR", raising=False)

        text = ConsoleFormatter(color=True).format(mixed_result)

        assert "\x1b[" in text

    def test_given_no_differences_when_rendered_then_clean_message(
        self, empty_result: ComparisonResult
    ) -> None:
        """A clean result says so and has no section tables."""
        # When
        items = ConsoleFormatter().renderables(empty_result)

        # Then
        assert len(items) == 3
        assert isinstance(items[-1], Text)
        assert items[-1].plain == "No API differences found."

    def test_given_markup_in_names_when_formatted_then_escaped(self) -> None:
        """Square brackets in descriptions are printed literally."""
        # Given
        result = ComparisonResult(
            baseline_name="A",
            candidate_name="B",
            differences=(
                ApiDifference(
                    change_type=ChangeType.ADDED,
                    element_kind=ElementKind.METHOD,
                    element_name="Contoso.Grid.Item",
                    description="Added indexer [bold]",
                ),
            ),
        )

        # When
        text = ConsoleFormatter(color=False).format(result)

        # Then
        assert "[bold]" in text
