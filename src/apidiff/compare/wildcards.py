"""Wildcard name patterns (``*`` and ``?``) as case-insensitive regexes.

Compiled patterns are applied with ``fullmatch``; the whole name must match.
"""

from __future__ import annotations

import re


def compile_wildcard(pattern: str) -> re.Pattern[str]:
    """``Contoso.Internal.*`` -> ``Contoso\\.Internal\\..*`` (IGNORECASE, DOTALL).

    Raises:
        re.error: The translated pattern does not compile.
    """
    body = re.escape(pattern).replace(r"\*", ".*").replace(r"\?", ".")
    return re.compile(body, re.IGNORECASE | re.DOTALL)


def matches_wildcard(name: str, pattern: str) -> bool:
    """Match ``name`` against one pattern; falls back to literal equality."""
    try:
        return compile_wildcard(pattern).fullmatch(name) is not None
    except re.error:
        return name.lower() == pattern.lower()
