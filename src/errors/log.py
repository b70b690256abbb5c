"""Collection of per-file errors recovered during a run.

Unreadable and unparseable files never abort a search. They are recorded
here so a surrounding layer (the CLI) can report them, and mirrored to the
standard ``logging`` hierarchy as they happen.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any

from errors.categories import ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)

_LOG_LEVELS: dict[ErrorSeverity, int] = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass(frozen=True)
class ErrorContext:
    """Details of one recovered error."""

    file_path: str
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    line_number: int | None = None
    exception_type: str | None = None
    additional_data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(
        cls,
        file_path: str,
        category: ErrorCategory,
        exc: BaseException,
        *,
        line_number: int | None = None,
    ) -> ErrorContext:
        return cls(
            file_path=file_path,
            category=category,
            severity=category.severity,
            message=str(exc) or exc.__class__.__name__,
            line_number=line_number,
            exception_type=exc.__class__.__name__,
        )

    def formatted_message(self) -> str:
        if self.line_number is not None:
            return f"{self.message} (line {self.line_number})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "line_number": self.line_number,
            "exception_type": self.exception_type,
            "additional_data": dict(self.additional_data),
        }


class ErrorLog:
    """Bounded, severity-filtered store of :class:`ErrorContext` entries."""

    def __init__(
        self,
        max_errors: int = 1000,
        min_severity: ErrorSeverity = ErrorSeverity.INFO,
    ) -> None:
        self._errors: deque[ErrorContext] = deque(maxlen=max_errors)
        self._counts: Counter[ErrorCategory] = Counter()
        self._min_severity = min_severity
        self._lock = threading.Lock()

    def record(self, context: ErrorContext) -> None:
        if not context.severity.is_at_least(self._min_severity):
            return
        with self._lock:
            self._errors.append(context)
            self._counts[context.category] += 1
        logger.log(
            _LOG_LEVELS[context.severity],
            "%s: %s: %s",
            context.file_path,
            context.category.description,
            context.formatted_message(),
        )

    @property
    def errors(self) -> list[ErrorContext]:
        return list(self._errors)

    def by_category(self, category: ErrorCategory) -> list[ErrorContext]:
        return [error for error in self._errors if error.category is category]

    def count(self, category: ErrorCategory | None = None) -> int:
        if category is None:
            return len(self._errors)
        return self._counts[category]

    def summary(self) -> dict[str, Any]:
        """Totals by category and severity, plus files with three or more errors."""
        by_severity = Counter(error.severity.value for error in self._errors)
        per_file = Counter(error.file_path for error in self._errors)
        critical_files = {
            path: count for path, count in per_file.most_common(10) if count >= 3
        }
        return {
            "total": len(self._errors),
            "by_category": {
                category.value: count
                for category, count in sorted(
                    self._counts.items(), key=lambda item: item[0].value
                )
                if count
            },
            "by_severity": dict(sorted(by_severity.items())),
            "critical_files": critical_files,
        }

    def exceeds_threshold(self, total_files: int, threshold: float = 0.2) -> bool:
        """Return True when the share of failing files is above ``threshold``."""
        if total_files == 0:
            return False
        failing = {error.file_path for error in self._errors}
        return len(failing) / total_files > threshold

    def clear(self) -> None:
        self._errors.clear()
        self._counts.clear()

    def __len__(self) -> int:
        return len(self._errors)


__all__ = ["ErrorContext", "ErrorLog"]
