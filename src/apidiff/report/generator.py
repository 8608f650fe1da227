"""Select a formatter by name and write reports."""

from __future__ import annotations

from pathlib import Path

import structlog

from apidiff.compare.models import ComparisonResult
from apidiff.core.logging import get_logger
from apidiff.report.base import ReportFormatter
from apidiff.report.console import ConsoleFormatter
from apidiff.report.html import HtmlFormatter
from apidiff.report.json_report import JsonFormatter
from apidiff.report.markdown import MarkdownFormatter


def default_formatters(*, color: bool = True) -> dict[str, ReportFormatter]:
    return {
        "console": ConsoleFormatter(color=color),
        "json": JsonFormatter(),
        "markdown": MarkdownFormatter(),
        "html": HtmlFormatter(),
    }


class ReportGenerator:
    """Dispatches to a registered formatter; unknown formats fall back to console."""

    def __init__(
        self,
        formatters: dict[str, ReportFormatter] | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._formatters = formatters if formatters is not None else default_formatters()
        self._log = logger or get_logger(__name__)

    @property
    def supported_formats(self) -> list[str]:
        return list(self._formatters)

    def generate_report(self, result: ComparisonResult, output_format: str) -> str:
        self._log.info("report_generating", format=output_format)
        formatter = self._formatters.get(output_format)
        if formatter is None:
            self._log.warning("report_format_unsupported", format=output_format, fallback="console")
            formatter = self._formatters.get("console") or ConsoleFormatter()
        return formatter.format(result)

    def save_report(self, result: ComparisonResult, output_format: str, path: str | Path) -> Path:
        """Render and write the report, creating parent directories."""
        target = Path(path).expanduser()
        report = self.generate_report(result, output_format)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(report, encoding="utf-8")
        except OSError as e:
            self._log.error("report_save_failed", path=str(target), error=str(e))
            raise
        self._log.info("report_saved", path=str(target), format=output_format)
        return target
