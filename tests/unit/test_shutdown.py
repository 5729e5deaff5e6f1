"""Tests for the final-flush hooks (atexit and signals)."""

from __future__ import annotations

import gc
import signal
from pathlib import Path
from types import FrameType

import pytest

from logrota import LogSink, SinkConfig, SinkState
from logrota.core import shutdown


def _sink(path: Path) -> LogSink:
    return LogSink(SinkConfig(active_path=path, name="t", buffer_capacity=100))


def test_atexit_closes_registered_sinks(log_path: Path) -> None:
    sink = _sink(log_path)
    sink.emit(1, "pending at exit")

    shutdown._atexit_handler()

    assert sink.state is SinkState.TERMINATED
    assert log_path.read_text() == "pending at exit\n"


def test_atexit_runs_once(log_path: Path) -> None:
    _sink(log_path)
    shutdown._atexit_handler()
    sink_two = _sink(log_path.with_name("two.log"))
    sink_two.emit(1, "late")

    shutdown._atexit_handler()

    assert sink_two.state is SinkState.READY


def test_registry_is_weak(log_path: Path) -> None:
    sink = _sink(log_path)
    assert len(shutdown.registered_sinks()) == 1

    del sink
    gc.collect()

    assert shutdown.registered_sinks() == []


def test_failing_sink_does_not_block_others(log_path: Path) -> None:
    class _Broken:
        def close(self) -> bool:
            raise RuntimeError("boom")

        def flush(self) -> bool:
            raise RuntimeError("boom")

    broken = _Broken()
    shutdown.register_sink(broken)  # type: ignore[arg-type]
    sink = _sink(log_path)
    sink.emit(1, "still flushed")

    shutdown._flush_all(close=True)

    assert log_path.read_text() == "still flushed\n"


def test_signal_flushes_and_defers_to_previous_handler(log_path: Path) -> None:
    seen: list[int] = []

    def previous(signum: int, _frame: FrameType | None) -> None:
        seen.append(signum)

    saved = signal.signal(signal.SIGTERM, previous)
    try:
        sink = _sink(log_path)
        assert signal.getsignal(signal.SIGTERM) is shutdown._signal_handler
        sink.emit(1, "pending at signal")

        shutdown._signal_handler(signal.SIGTERM, None)

        assert log_path.read_text() == "pending at signal\n"
        assert seen == [signal.SIGTERM]
        # Flushed, not closed: the process may keep running
        assert sink.state is SinkState.READY
        assert signal.getsignal(signal.SIGTERM) is shutdown._signal_handler
    finally:
        shutdown._reset_for_tests()
        signal.signal(signal.SIGTERM, saved)


def test_signal_handlers_can_be_disabled(
    monkeypatch: pytest.MonkeyPatch, log_path: Path
) -> None:
    monkeypatch.setenv("LOG_SIGNAL_HANDLERS", "false")
    before = signal.getsignal(signal.SIGTERM)

    _sink(log_path)

    assert signal.getsignal(signal.SIGTERM) is before
