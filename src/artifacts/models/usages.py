"""Usage models for symbol occurrences found in PHP source files."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

UsageKind = Literal[
    "instantiation",
    "static-call",
    "method-call",
    "instanceof-check",
    "class-constant-fetch",
    "type-declaration",
]


class Confidence(str, Enum):
    """How certain a detected usage truly refers to the searched symbol."""

    CERTAIN = "CERTAIN"
    PROBABLE = "PROBABLE"
    POSSIBLE = "POSSIBLE"
    DYNAMIC = "DYNAMIC"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    def at_least(self, other: Confidence) -> bool:
        return self.rank >= other.rank


_CONFIDENCE_RANK: dict[Confidence, int] = {
    Confidence.DYNAMIC: 0,
    Confidence.POSSIBLE: 1,
    Confidence.PROBABLE: 2,
    Confidence.CERTAIN: 3,
}


class ContextWindow(BaseModel):
    """Raw source lines surrounding a usage (1-based, inclusive)."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int
    lines: tuple[str, ...]


class UsageRecord(BaseModel):
    """A single detected occurrence of the searched symbol."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file: str
    line: int
    code: str
    kind: UsageKind = Field(alias="type")
    confidence: Confidence
    context: ContextWindow

    def with_confidence(self, confidence: Confidence) -> UsageRecord:
        """Return a copy carrying ``confidence``."""
        if confidence is self.confidence:
            return self
        return self.model_copy(update={"confidence": confidence})

    def to_payload(self) -> dict[str, object]:
        """Serialize using the public output keys (``type`` for the kind)."""
        return self.model_dump(mode="json", by_alias=True)


__all__ = ["Confidence", "ContextWindow", "UsageKind", "UsageRecord"]
