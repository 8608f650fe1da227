"""Standalone HTML report exported from the console tables."""

from __future__ import annotations

import io

from rich.console import Console

from apidiff.compare.models import ComparisonResult
from apidiff.report.console import ConsoleFormatter

_PAGE_FORMAT = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>API Comparison Report</title>
<style>
{stylesheet}
body {{
    color: {foreground};
    background-color: {background};
}}
</style>
</head>
<body>
<pre style="font-family:Menlo,'DejaVu Sans Mono',consolas,'Courier New',monospace"><code style="font-family:inherit">{code}</code></pre>
</body>
</html>
"""


class HtmlFormatter:
    """Renders the console layout into a self-contained HTML page."""

    def __init__(self, *, width: int = 140) -> None:
        self.width = width

    def format(self, result: ComparisonResult) -> str:
        console = Console(
            file=io.StringIO(),
            record=True,
            width=self.width,
            force_terminal=True,
            color_system="truecolor",
            highlight=False,
        )
        for renderable in ConsoleFormatter().renderables(result):
            console.print(renderable)
            console.print()
        return console.export_html(code_format=_PAGE_FORMAT, inline_styles=True)
