"""Escaping for full-text query terms and tags."""

from __future__ import annotations

from collections.abc import Mapping

# Backslash first; replacements below introduce backslashes that must not be re-escaped.
ESCAPE_TABLE: Mapping[str, str] = {
    "\\": "\\\\",
    "-": "\\-",
    "~": "\\~",
    "<": "\\<",
    '"': '\\"',
    "'": "\\'",
    "/": "\\/",
}

_TRANSLATION = str.maketrans(dict(ESCAPE_TABLE))


def escape(text: str) -> str:
    """Escape characters that carry meaning in the full-text query syntax.

    Every character is substituted in a single pass, so backslashes inserted
    for one character are never escaped a second time.
    """

    return text.translate(_TRANSLATION)


__all__ = ["ESCAPE_TABLE", "escape"]
