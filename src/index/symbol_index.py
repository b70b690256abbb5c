"""Registry of PHP files participating in a usage search."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from errors import ErrorCategory, ErrorContext, ErrorLog
from parse.php_parser import PhpSyntaxError
from parse.treesitter_symbols import extract_symbols_treesitter
from rules.config import FinderConfig
from scan.files import collect_php_files

if TYPE_CHECKING:
    from collections.abc import Iterable

    from artifacts.models.symbols import SymbolRecord

logger = logging.getLogger(__name__)


class SymbolIndex:
    """Ordered, deduplicated set of absolute file paths plus their declarations.

    The index is only read during a search; it is never refreshed by the
    finder.
    """

    def __init__(self) -> None:
        self._files: dict[str, list[SymbolRecord]] = {}
        self.errors = ErrorLog()

    def index_file(self, file_path: str | Path) -> bool:
        """Register ``file_path``. Returns False if the path does not exist."""
        path = Path(file_path).expanduser()
        if not path.is_file():
            logger.debug("Not indexing missing file %s", file_path)
            return False

        key = str(path.resolve())
        if key in self._files:
            return True

        self._files[key] = self._extract_symbols(key)
        return True

    def index_paths(
        self,
        paths: Iterable[str | Path],
        *,
        config: FinderConfig | None = None,
        exclude_paths: Iterable[str | Path] = (),
    ) -> int:
        """Register every PHP file under ``paths``; returns the number added."""
        before = len(self._files)
        for file_path in collect_php_files(
            paths,
            config=config or FinderConfig(),
            exclude_paths=exclude_paths,
        ):
            self.index_file(file_path)
        added = len(self._files) - before
        logger.info("Indexed %d file(s)", added)
        return added

    def _extract_symbols(self, key: str) -> list[SymbolRecord]:
        try:
            source_bytes = Path(key).read_bytes()
        except OSError as exc:
            self.errors.record(
                ErrorContext.from_exception(key, ErrorCategory.IO_ERROR, exc)
            )
            return []

        try:
            return extract_symbols_treesitter(source_bytes, key)
        except PhpSyntaxError as exc:
            self.errors.record(
                ErrorContext.from_exception(
                    key, ErrorCategory.SYNTAX_ERROR, exc, line_number=exc.line
                )
            )
            return []

    def indexed_files(self) -> list[str]:
        return list(self._files)

    def symbols(self) -> dict[str, list[SymbolRecord]]:
        return {path: list(records) for path, records in self._files.items()}

    def find_symbol(self, qualified_name: str) -> list[SymbolRecord]:
        """Return declarations whose qualified name equals ``qualified_name``."""
        wanted = qualified_name.lstrip("\\").lower()
        return [
            record
            for records in self._files.values()
            for record in records
            if record.qualified_name.lower() == wanted
        ]

    def symbol_count(self) -> int:
        return sum(len(records) for records in self._files.values())

    def clear(self) -> None:
        self._files.clear()
        self.errors.clear()

    def __len__(self) -> int:
        return len(self._files)


__all__ = ["SymbolIndex"]
