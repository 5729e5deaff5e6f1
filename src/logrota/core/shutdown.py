"""Final-flush hooks for logrota sinks.

This module provides:
- Atexit handler that closes (final-flushes) every registered sink
- Signal handlers for SIGTERM/SIGINT that flush, then hand the signal back
- WeakSet-based sink registration to avoid keeping sinks alive

Handlers are installed once, the first time a sink registers. They are
best-effort: a failing sink never prevents the others from flushing.
"""

from __future__ import annotations

import atexit
import signal
import sys
import threading
import weakref
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from types import FrameType

    from .sink import LogSink


# Module-level state
_shutdown_in_progress: bool = False
_installed: bool = False
_install_lock = threading.Lock()
_registered_sinks: weakref.WeakSet[Any] = weakref.WeakSet()
_original_handlers: dict[int, Any] = {}


def _get_shutdown_settings() -> dict[str, Any]:
    """Get shutdown settings from Settings, with fallback defaults."""
    try:
        from .settings import Settings

        settings = Settings()
        return {
            "atexit_flush": settings.atexit_flush,
            "signal_handlers": settings.signal_handlers,
        }
    except Exception:
        # Invalid unrelated env values must not disable the final flush
        return {"atexit_flush": True, "signal_handlers": True}


def register_sink(sink: LogSink) -> None:
    """Register a sink for the final flush and install hooks on first use."""
    _registered_sinks.add(sink)
    _ensure_installed()


def unregister_sink(sink: LogSink) -> None:
    """Unregister a sink, typically after an explicit ``close()``."""
    _registered_sinks.discard(sink)


def registered_sinks() -> list[Any]:
    return list(_registered_sinks)


def _flush_all(*, close: bool) -> None:
    # Snapshot the sinks (WeakSet iteration can fail if GC runs)
    try:
        sinks = list(_registered_sinks)
    except Exception:  # pragma: no cover - rare GC race
        return
    for sink in sinks:
        try:
            if close:
                sink.close()
            else:
                sink.flush()
        except Exception:
            continue


def _atexit_handler() -> None:
    """Close every registered sink on normal interpreter exit."""
    global _shutdown_in_progress

    if _shutdown_in_progress:
        return
    _shutdown_in_progress = True
    _flush_all(close=True)


def _signal_handler(signum: int, _frame: FrameType | None) -> None:
    """Flush sinks, then let the original handler deal with the signal.

    Sinks are flushed but not closed: a handled SIGINT (KeyboardInterrupt)
    may leave the process running and still logging.
    """
    _flush_all(close=False)

    original = _original_handlers.get(signum, signal.SIG_DFL)
    if original is None:
        original = signal.SIG_DFL
    try:
        signal.signal(signum, original)
        signal.raise_signal(signum)
    except Exception:  # pragma: no cover - rare signal error
        sys.exit(128 + signum)
    finally:
        # Re-arm in case the original handler returned instead of exiting
        try:
            signal.signal(signum, _signal_handler)
        except Exception:  # pragma: no cover - interpreter shutting down
            pass


def _install_signal_handlers() -> None:
    """Install SIGINT/SIGTERM handlers when running on the main thread."""
    if threading.current_thread() is not threading.main_thread():
        return
    signums = [signal.SIGINT]
    # SIGTERM is not available on Windows
    if hasattr(signal, "SIGTERM"):
        signums.append(signal.SIGTERM)
    for signum in signums:
        try:
            _original_handlers[signum] = signal.signal(signum, _signal_handler)
        except (ValueError, OSError):  # pragma: no cover - embedded interpreters
            continue


def _ensure_installed() -> None:
    global _installed
    with _install_lock:
        if _installed:
            return
        _installed = True
        settings = _get_shutdown_settings()
        if settings["atexit_flush"]:
            atexit.register(_atexit_handler)
        if settings["signal_handlers"]:
            _install_signal_handlers()


def _reset_for_tests() -> None:
    """Restore original signal handlers and forget registered sinks."""
    global _installed, _shutdown_in_progress
    for signum, handler in list(_original_handlers.items()):
        try:
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
        except Exception:  # pragma: no cover
            pass
    _original_handlers.clear()
    _registered_sinks.clear()
    try:
        atexit.unregister(_atexit_handler)
    except Exception:  # pragma: no cover
        pass
    _installed = False
    _shutdown_in_progress = False
