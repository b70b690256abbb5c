"""Shared source-text helpers."""

from __future__ import annotations

from artifacts.models.usages import ContextWindow

CONTEXT_RADIUS = 2


def split_source_lines(source: str) -> list[str]:
    """Split source text on newlines, dropping ``\\r`` and the final terminator.

    Only ``\\n`` separates lines so numbering agrees with parser rows.

    Examples:
        >>> split_source_lines("a\\r\\nb\\n")
        ['a', 'b']
        >>> split_source_lines("")
        []
    """
    if not source:
        return []
    lines = [line.rstrip("\r") for line in source.split("\n")]
    if source.endswith("\n"):
        lines.pop()
    return lines


def line_at(lines: list[str], line: int) -> str:
    """Return the trimmed text of 1-based ``line``, or "" when out of range."""
    if line < 1 or line > len(lines):
        return ""
    return lines[line - 1].strip()


def context_window(
    lines: list[str], line: int, radius: int = CONTEXT_RADIUS
) -> ContextWindow:
    """Build the raw-line window around ``line``, clipped to the file bounds."""
    # An empty file still yields a window containing the usage line.
    last_line = max(len(lines), line, 1)
    start = max(1, line - radius)
    end = min(last_line, line + radius)
    window = tuple(
        lines[number - 1] if number <= len(lines) else ""
        for number in range(start, end + 1)
    )
    return ContextWindow(start=start, end=end, lines=window)
