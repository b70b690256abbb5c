"""File registry consulted by usage searches."""

from index.symbol_index import SymbolIndex

__all__ = ["SymbolIndex"]
