from __future__ import annotations

import pytest

from logrota.core.errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    FatalLogEmitted,
    InvalidSizeFormat,
    LockUnavailable,
    LogrotaError,
    SinkIOError,
)


class TestErrorTypes:
    def test_default_categories(self) -> None:
        assert ConfigurationError("x").category is ErrorCategory.CONFIGURATION
        assert ConfigurationError("x").severity is ErrorSeverity.CRITICAL
        assert SinkIOError("x").category is ErrorCategory.IO
        assert LockUnavailable("x").category is ErrorCategory.LOCK
        assert InvalidSizeFormat("x").category is ErrorCategory.VALIDATION

    def test_hierarchy(self) -> None:
        for cls in (
            ConfigurationError,
            SinkIOError,
            LockUnavailable,
            InvalidSizeFormat,
        ):
            assert issubclass(cls, LogrotaError)
        assert issubclass(InvalidSizeFormat, ValueError)

    def test_error_chaining(self) -> None:
        original = OSError("disk full")

        error = SinkIOError("write failed", cause=original, path="/tmp/a.log")

        assert error.__cause__ is original
        assert error.context == {"path": "/tmp/a.log"}

    def test_to_dict(self) -> None:
        error = ConfigurationError(
            "bad level", cause=ValueError("7"), field="min_level"
        )

        data = error.to_dict()

        assert data["error_type"] == "ConfigurationError"
        assert data["message"] == "bad level"
        assert data["category"] == "configuration"
        assert data["severity"] == "critical"
        assert data["context"] == {"field": "min_level"}
        assert data["cause"] == "ValueError: 7"

    def test_fatal_is_system_exit_with_code_one(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            raise FatalLogEmitted("[FATAL] boom")

        assert exc_info.value.code == 1
        assert isinstance(exc_info.value, FatalLogEmitted)
        assert exc_info.value.message == "[FATAL] boom"
