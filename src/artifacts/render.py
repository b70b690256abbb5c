"""Output formatting for usage search results."""

from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import orjson
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from artifacts.models.usages import Confidence

if TYPE_CHECKING:
    from collections.abc import Sequence

    from artifacts.models.usages import UsageRecord

OutputFormat = Literal["json", "table", "text"]

OUTPUT_FORMATS: tuple[OutputFormat, ...] = ("json", "table", "text")

TABLE_WIDTH = 160


def filter_by_confidence(
    usages: Sequence[UsageRecord], min_confidence: Confidence
) -> list[UsageRecord]:
    """Keep usages whose tier is at least ``min_confidence``."""
    return [usage for usage in usages if usage.confidence.at_least(min_confidence)]


def render_json(usages: Sequence[UsageRecord]) -> str:
    payload = [usage.to_payload() for usage in usages]
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8")


def render_table(usages: Sequence[UsageRecord]) -> str:
    """Render usages as a plain (uncolored) rich table."""
    if not usages:
        return "No usages found.\n"

    table = Table(show_header=True, box=box.SIMPLE)
    table.add_column("File", no_wrap=True)
    table.add_column("Line", justify="right", no_wrap=True)
    table.add_column("Confidence", no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("Code", overflow="fold")
    for usage in usages:
        table.add_row(
            escape(Path(usage.file).name),
            str(usage.line),
            usage.confidence.value,
            usage.kind,
            escape(usage.code),
        )

    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=TABLE_WIDTH,
        color_system=None,
        highlight=False,
        emoji=False,
    )
    console.print(f"Found {len(usages)} usage(s):", markup=False)
    console.print(table)
    return buffer.getvalue()


def render_text(usages: Sequence[UsageRecord]) -> str:
    """List each usage with its context window, marking the usage line."""
    if not usages:
        return "No symbol usages found.\n"

    parts = [f"Found {len(usages)} usage(s):", ""]
    for usage in usages:
        parts.append(f"{usage.file}:{usage.line}")
        parts.append(
            f"  {usage.code} (confidence: {usage.confidence.value}, type: {usage.kind})"
        )
        if usage.context.lines:
            parts.append("  Context:")
            for offset, raw_line in enumerate(usage.context.lines):
                line_number = usage.context.start + offset
                marker = ">" if line_number == usage.line else " "
                parts.append(f"  {marker} {line_number}: {raw_line.strip()}")
        parts.append("")
    return "\n".join(parts)


def render(usages: Sequence[UsageRecord], output_format: OutputFormat) -> str:
    if output_format == "json":
        return render_json(usages) + "\n"
    if output_format == "table":
        return render_table(usages)
    return render_text(usages)


__all__ = [
    "OUTPUT_FORMATS",
    "OutputFormat",
    "filter_by_confidence",
    "render",
    "render_json",
    "render_table",
    "render_text",
]
