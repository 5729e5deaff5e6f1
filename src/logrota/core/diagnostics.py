"""Internal diagnostics channel.

Warnings about the logging machinery itself (failed flushes, failed copies,
failed deletions) go to stderr as single JSON lines. They never go into the
log file being managed.

The enabled flag is read once from ``LOG_INTERNAL_DIAGNOSTICS`` and cached in
``_internal_logging_enabled``; tests reset the cache between runs.
"""

from __future__ import annotations

import sys
import time
from typing import TYPE_CHECKING, Any, Callable

import orjson

if TYPE_CHECKING:
    from .errors import LogrotaError

_internal_logging_enabled: bool | None = None

# Tests may swap the writer to capture output without touching sys.stderr
_writer: Callable[[bytes], None] | None = None


def _is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(Settings().internal_diagnostics)
        except Exception:
            _internal_logging_enabled = True
    return _internal_logging_enabled


def set_writer(writer: Callable[[bytes], None] | None) -> None:
    """Install a custom line writer (``None`` restores stderr)."""
    global _writer
    _writer = writer


def _default_write(line: bytes) -> None:
    sys.stderr.write(line.decode("utf-8", errors="replace"))
    sys.stderr.flush()


def _emit(level: str, component: str, message: str, **fields: Any) -> None:
    if not _is_enabled():
        return
    payload: dict[str, Any] = {
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "level": level,
        "component": component,
        "message": message,
    }
    payload.update(fields)
    try:
        line = orjson.dumps(payload, default=str) + b"\n"
        (_writer or _default_write)(line)
    except Exception:
        # The diagnostics channel is the last resort; nothing left to report to
        pass


def warn(component: str, message: str, **fields: Any) -> None:
    _emit("WARN", component, message, **fields)


def report(component: str, error: LogrotaError, **fields: Any) -> None:
    """Warn with the payload of ``error.to_dict()`` flattened into the line."""
    payload = error.to_dict()
    message = payload.pop("message")
    data: dict[str, Any] = dict(payload.pop("context", {}))
    data.update(payload)
    data.update(fields)
    _emit("WARN", component, message, **data)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, **fields)
