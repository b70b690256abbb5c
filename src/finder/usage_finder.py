"""Orchestrates usage detection across every indexed file.

For each file the finder reads the source, parses it, runs the
:class:`~parse.usage_visitor.UsageVisitor` and hands every candidate to the
:class:`~finder.confidence.ConfidenceScorer`. The visitor decides *whether* a
node refers to the searched symbol; the scorer decides *how certain* the line
reads. A file that cannot be read or parsed contributes nothing and never
stops the search.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from errors import ErrorCategory, ErrorContext, ErrorLog
from finder.confidence import ConfidenceScorer
from parse.php_parser import PhpSyntaxError, parse_source
from parse.usage_visitor import UsageVisitor
from rules.config import FinderConfig

if TYPE_CHECKING:
    from artifacts.models.usages import UsageRecord
    from index.symbol_index import SymbolIndex

logger = logging.getLogger(__name__)


class UsageFinder:
    """Finds usages of a symbol in the files registered with a SymbolIndex."""

    def __init__(
        self,
        index: SymbolIndex,
        *,
        config: FinderConfig | None = None,
        scorer: ConfidenceScorer | None = None,
    ) -> None:
        self._index = index
        self._config = config or FinderConfig()
        self._scorer = scorer or ConfidenceScorer()
        self.errors = ErrorLog()

    def find(self, target_symbol: str) -> list[UsageRecord]:
        """Return all usages of ``target_symbol`` in index order.

        Args:
            target_symbol: Qualified symbol name, e.g. ``App\\User`` or
                ``App\\User::getName``.

        Returns:
            Usage records grouped by file in index order, and in source order
            within each file. Never raises for per-file failures.
        """
        self.errors = ErrorLog()
        files = self._index.indexed_files()
        logger.debug("Searching %d file(s) for %s", len(files), target_symbol)

        if self._config.jobs > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self._config.jobs) as executor:
                per_file = list(
                    executor.map(
                        lambda path: self.find_in_file(target_symbol, path), files
                    )
                )
        else:
            per_file = [self.find_in_file(target_symbol, path) for path in files]

        usages = [usage for file_usages in per_file for usage in file_usages]
        logger.info("Found %d usage(s) of %s", len(usages), target_symbol)
        return usages

    def find_in_file(self, target_symbol: str, file_path: str) -> list[UsageRecord]:
        """Return scored usages in one file; [] if it cannot be read or parsed."""
        try:
            source_bytes = Path(file_path).read_bytes()
        except OSError as exc:
            self.errors.record(
                ErrorContext.from_exception(file_path, ErrorCategory.IO_ERROR, exc)
            )
            return []

        try:
            tree = parse_source(source_bytes)
        except PhpSyntaxError as exc:
            self.errors.record(
                ErrorContext.from_exception(
                    file_path, ErrorCategory.SYNTAX_ERROR, exc, line_number=exc.line
                )
            )
            return []

        candidates = UsageVisitor(target_symbol, file_path, source_bytes).visit(tree)
        return [self._rescore(usage) for usage in candidates]

    def _rescore(self, usage: UsageRecord) -> UsageRecord:
        if usage.kind == "method-call":
            enclosing = "\n".join(usage.context.lines)
            return usage.with_confidence(
                self._scorer.score_with_context(usage.code, enclosing)
            )
        if self._config.rescore == "method-calls":
            return usage
        return usage.with_confidence(self._scorer.score(usage.code))


__all__ = ["UsageFinder"]
