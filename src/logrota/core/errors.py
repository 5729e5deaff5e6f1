"""
Error taxonomy for logrota.

Configuration problems are fatal and surface at sink construction. Runtime
I/O problems are reported through :mod:`logrota.core.diagnostics` and then
swallowed so that logging never crashes the host process. Lock contention is
not an error at all from the caller's point of view; ``LockUnavailable`` only
travels inside the rotation executor.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    CONFIGURATION = "configuration"
    IO = "io"
    LOCK = "lock"
    VALIDATION = "validation"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class LogrotaError(Exception):
    """Base error carrying a category, a severity and an optional cause."""

    default_category: ErrorCategory = ErrorCategory.IO
    default_severity: ErrorSeverity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.severity = severity or self.default_severity
        self.context: dict[str, Any] = dict(context)
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
        }
        if self.context:
            data["context"] = {k: str(v) for k, v in self.context.items()}
        if self.__cause__ is not None:
            data["cause"] = f"{type(self.__cause__).__name__}: {self.__cause__}"
        return data


class ConfigurationError(LogrotaError):
    """Invalid level, size, path or name; the sink never becomes ready."""

    default_category = ErrorCategory.CONFIGURATION
    default_severity = ErrorSeverity.CRITICAL


class SinkIOError(LogrotaError):
    """A directory, write, copy or delete operation failed."""

    default_category = ErrorCategory.IO
    default_severity = ErrorSeverity.MEDIUM


class LockUnavailable(LogrotaError):
    """Another holder owns the rotation lock."""

    default_category = ErrorCategory.LOCK
    default_severity = ErrorSeverity.LOW


class InvalidSizeFormat(LogrotaError, ValueError):
    """A size string such as ``10M`` could not be parsed."""

    default_category = ErrorCategory.VALIDATION
    default_severity = ErrorSeverity.MEDIUM


class FatalLogEmitted(SystemExit):
    """Raised after a FATAL record has been flushed; exits with status 1."""

    def __init__(self, message: str = "") -> None:
        super().__init__(1)
        self.message = message


__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "LogrotaError",
    "ConfigurationError",
    "SinkIOError",
    "LockUnavailable",
    "InvalidSizeFormat",
    "FatalLogEmitted",
]
