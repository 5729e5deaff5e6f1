"""
Root pytest configuration.
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests exercising several components or subprocesses",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def clean_log_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ambient LOG_* variables so tests see the documented defaults."""
    for key in list(os.environ):
        if key.upper().startswith("LOG_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics enabled-flag cache and writer around each test."""
    import logrota.core.diagnostics as diag

    diag._internal_logging_enabled = None
    diag.set_writer(None)
    yield
    diag._internal_logging_enabled = None
    diag.set_writer(None)


@pytest.fixture(autouse=True)
def reset_shutdown_hooks() -> Generator[None, None, None]:
    """Restore signal handlers and forget sinks registered during a test."""
    from logrota.core import shutdown

    yield
    shutdown._reset_for_tests()


@pytest.fixture
def diagnostics_lines() -> list[dict[str, Any]]:
    """Capture diagnostics warnings as parsed JSON objects."""
    import logrota.core.diagnostics as diag

    captured: list[dict[str, Any]] = []
    diag._internal_logging_enabled = True
    diag.set_writer(lambda line: captured.append(json.loads(line)))
    return captured


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "app.log"


@pytest.fixture
def make_sink(log_path: Path) -> Callable[..., Any]:
    """Build a ``LogSink`` on ``log_path`` without installing shutdown hooks."""
    from logrota import LogSink, build_sink_config

    def _make(
        *,
        fs: Any = None,
        clock: Any = None,
        time_source: Any = None,
        metrics: Any = None,
        **overrides: Any,
    ) -> Any:
        values: dict[str, Any] = {
            "active_path": log_path,
            "buffer_capacity": 1,
            "min_level": 0,
            "name": "test",
        }
        values.update(overrides)
        kwargs: dict[str, Any] = {"register_shutdown": False}
        if fs is not None:
            kwargs["fs"] = fs
        if clock is not None:
            kwargs["clock"] = clock
        if time_source is not None:
            kwargs["time_source"] = time_source
        if metrics is not None:
            kwargs["metrics"] = metrics
        sink = LogSink(build_sink_config(**values), **kwargs)
        return sink

    return _make
