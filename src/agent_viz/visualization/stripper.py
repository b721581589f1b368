"""Removal of already-charted content from display text."""

from __future__ import annotations

import re

_TABLE_SEPARATOR = re.compile(r"^\|[\s\-|:]+\|$")
_HTML_TABLE = re.compile(r"<table[\s\S]*?</table>", flags=re.IGNORECASE)
_EXCESS_NEWLINES = re.compile(r"\n\n\n+")
_HEADER_LINE = re.compile(r"^[A-Z][\w\s]+$")
_ALIGNED_ROW = re.compile(r"^[A-Z][\w\s]*\s{2,}[A-Z]")


def remove_markdown_tables(content: str) -> str:
    """Drop every pipe-delimited line, including separators."""

    kept = []
    for line in content.split("\n"):
        stripped = line.strip()
        if _TABLE_SEPARATOR.match(stripped):
            continue
        if len(stripped) > 1 and stripped.startswith("|") and stripped.endswith("|"):
            continue
        kept.append(line)
    return _EXCESS_NEWLINES.sub("\n\n", "\n".join(kept)).strip()


def remove_html_tables(content: str) -> str:
    return _HTML_TABLE.sub("", content)


def remove_data_headers(content: str) -> str:
    """Drop a title line and the whitespace-aligned block right below it.

    The block ends at the first blank line, markdown heading or list item.
    """

    lines = content.split("\n")
    kept: list[str] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        next_line = lines[i + 1].strip() if i + 1 < len(lines) else ""
        if _HEADER_LINE.match(line) and _ALIGNED_ROW.match(next_line):
            j = i + 1
            while j < len(lines):
                data_line = lines[j].strip()
                if not data_line or data_line.startswith(("#", "-")):
                    break
                j += 1
            i = j
            continue
        kept.append(line)
        i += 1
    return "\n".join(kept).strip()


def strip_visualized_content(content: str) -> str:
    cleaned = remove_markdown_tables(content)
    cleaned = remove_html_tables(cleaned)
    cleaned = remove_data_headers(cleaned)
    return _EXCESS_NEWLINES.sub("\n\n", cleaned).strip()
