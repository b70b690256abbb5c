"""Declaration models for symbols defined in PHP source files."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

SymbolKind = Literal[
    "class",
    "interface",
    "trait",
    "enum",
    "method",
    "function",
    "constant",
]


class SymbolRecord(BaseModel):
    """A symbol declared in a PHP source file."""

    path: str
    kind: SymbolKind
    name: str
    qualified_name: str
    start_line: int
    end_line: int


__all__ = ["SymbolKind", "SymbolRecord"]
