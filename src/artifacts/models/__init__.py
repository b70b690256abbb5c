"""Model namespace for phpusage records."""

from artifacts.models.symbols import SymbolKind, SymbolRecord
from artifacts.models.usages import Confidence, ContextWindow, UsageKind, UsageRecord

__all__ = [
    "Confidence",
    "ContextWindow",
    "SymbolKind",
    "SymbolRecord",
    "UsageKind",
    "UsageRecord",
]
