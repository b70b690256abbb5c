"""Error categories and severities for usage analysis."""

from __future__ import annotations

from enum import Enum


class ErrorSeverity(str, Enum):
    """Severity levels, ordered from least to most severe."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def priority(self) -> int:
        return _SEVERITY_PRIORITY[self]

    def is_at_least(self, other: ErrorSeverity) -> bool:
        return self.priority >= other.priority


_SEVERITY_PRIORITY: dict[ErrorSeverity, int] = {
    ErrorSeverity.INFO: 1,
    ErrorSeverity.WARNING: 2,
    ErrorSeverity.ERROR: 3,
    ErrorSeverity.CRITICAL: 4,
}


class ErrorCategory(str, Enum):
    """Kinds of failures that can occur while analyzing a file."""

    SYNTAX_ERROR = "syntax"
    IO_ERROR = "io"
    PARSER_ERROR = "parser"
    CONFIGURATION_ERROR = "configuration"
    INDEX_ERROR = "index"

    @property
    def description(self) -> str:
        return _CATEGORY_DESCRIPTIONS[self]

    @property
    def severity(self) -> ErrorSeverity:
        if self in (ErrorCategory.SYNTAX_ERROR, ErrorCategory.PARSER_ERROR):
            return ErrorSeverity.WARNING
        return ErrorSeverity.ERROR


_CATEGORY_DESCRIPTIONS: dict[ErrorCategory, str] = {
    ErrorCategory.SYNTAX_ERROR: "PHP syntax error in file",
    ErrorCategory.IO_ERROR: "File system I/O error",
    ErrorCategory.PARSER_ERROR: "Parser processing error",
    ErrorCategory.CONFIGURATION_ERROR: "Configuration or validation error",
    ErrorCategory.INDEX_ERROR: "Symbol index operation error",
}


__all__ = ["ErrorCategory", "ErrorSeverity"]
