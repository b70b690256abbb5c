"""Usage search and confidence scoring."""

from finder.confidence import ConfidenceScorer
from finder.usage_finder import UsageFinder

__all__ = ["ConfidenceScorer", "UsageFinder"]
