"""Report formatters for comparison results."""

from apidiff.report.base import ReportFormatter
from apidiff.report.console import ConsoleFormatter
from apidiff.report.generator import ReportGenerator, default_formatters
from apidiff.report.html import HtmlFormatter
from apidiff.report.json_report import JsonFormatter
from apidiff.report.markdown import MarkdownFormatter

__all__ = [
    "ConsoleFormatter",
    "HtmlFormatter",
    "JsonFormatter",
    "MarkdownFormatter",
    "ReportFormatter",
    "ReportGenerator",
    "default_formatters",
]
