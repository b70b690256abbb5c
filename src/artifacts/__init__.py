"""Usage and symbol models plus their output renderers."""

from __future__ import annotations

from artifacts.render import (
    OUTPUT_FORMATS,
    filter_by_confidence,
    render,
    render_json,
    render_table,
    render_text,
)

__all__ = [
    "OUTPUT_FORMATS",
    "filter_by_confidence",
    "render",
    "render_json",
    "render_table",
    "render_text",
]
