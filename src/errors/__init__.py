"""Error taxonomy and recovered-error collection."""

from errors.categories import ErrorCategory, ErrorSeverity
from errors.log import ErrorContext, ErrorLog

__all__ = ["ErrorCategory", "ErrorContext", "ErrorLog", "ErrorSeverity"]
