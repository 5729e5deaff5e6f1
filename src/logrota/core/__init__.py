"""Core buffering, configuration and error types for logrota."""

from .errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    FatalLogEmitted,
    InvalidSizeFormat,
    LockUnavailable,
    LogrotaError,
    SinkIOError,
)
from .sizes import format_size, parse_size

__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "ErrorSeverity",
    "FatalLogEmitted",
    "InvalidSizeFormat",
    "LockUnavailable",
    "LogrotaError",
    "SinkIOError",
    "format_size",
    "parse_size",
]
