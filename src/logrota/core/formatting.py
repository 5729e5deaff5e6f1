"""Message sanitising and record rendering.

These helpers produce the opaque record string handed to
:meth:`LogSink.emit`. The sink never inspects it.
"""

from __future__ import annotations

import os
import re
import sys
from datetime import datetime
from typing import Any, Final

import orjson

MAX_MESSAGE_LENGTH: Final[int] = 4096
EMPTY_MESSAGE: Final[str] = "No message provided"

_ANSI_RE = re.compile(r"\x1b(?:\[[0-?]*[ -/]*[@-~]|\][^\x07]*\x07|[@-Z\\-_])")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")

_RESET: Final[str] = "\033[0m"
_LEVEL_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[0;34m",
    "INFO": "\033[0;32m",
    "WARN": "\033[1;33m",
    "ERROR": "\033[0;31m",
    "FATAL": "\033[1;31m",
}

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def sanitize(message: Any) -> str:
    """Strip ANSI sequences and control characters, bound the length.

    Empty or whitespace-only input becomes ``"No message provided"``.
    """
    text = "" if message is None else str(message)
    text = _ANSI_RE.sub("", text)
    text = _CONTROL_RE.sub(" ", text).strip()
    if not text:
        return EMPTY_MESSAGE
    if len(text) > MAX_MESSAGE_LENGTH:
        text = text[: MAX_MESSAGE_LENGTH - 3] + "..."
    return text


def format_timestamp(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S")


def render_human(
    level: str,
    message: str,
    timestamp: datetime,
    *,
    context: str | None = None,
) -> str:
    parts = [f"[{level}]", format_timestamp(timestamp)]
    if context:
        parts.append(f"[{context}]")
    parts.append(message)
    return " ".join(parts)


def render_json(
    level: str,
    message: str,
    timestamp: datetime,
    *,
    name: str,
    context: str | None = None,
) -> str:
    payload: dict[str, Any] = {
        "timestamp": format_timestamp(timestamp),
        "level": level,
        "name": name,
        "message": message,
    }
    if context:
        payload["context"] = context
    return orjson.dumps(payload).decode("utf-8")


def colorize(level: str, line: str) -> str:
    """Colour the leading ``[LEVEL]`` tag of a human-rendered line."""
    color = _LEVEL_COLORS.get(level)
    tag = f"[{level}]"
    if color is None or not line.startswith(tag):
        return line
    return f"{color}{tag}{_RESET}{line[len(tag):]}"


def caller_context() -> str | None:
    """``file.py:lineno`` of the nearest frame outside this package."""
    frame = sys._getframe(1)
    while frame is not None:
        filename = os.path.abspath(frame.f_code.co_filename)
        if not filename.startswith(_PACKAGE_DIR + os.sep):
            return f"{os.path.basename(filename)}:{frame.f_lineno}"
        frame = frame.f_back  # type: ignore[assignment]
    return None
