"""Numeric log levels.

Levels are small integers so that ``LOG_LEVEL=2`` reads naturally in a shell:

    0 DEBUG, 1 INFO, 2 WARN, 3 ERROR, 4 FATAL

FATAL is the most severe level. Emitting at FATAL flushes the sink and stops
the process.
"""

from __future__ import annotations

from typing import Final

DEBUG: Final[int] = 0
INFO: Final[int] = 1
WARN: Final[int] = 2
ERROR: Final[int] = 3
FATAL: Final[int] = 4

MIN_LEVEL: Final[int] = DEBUG
MAX_LEVEL: Final[int] = FATAL

_LEVEL_NAMES: Final[dict[int, str]] = {
    DEBUG: "DEBUG",
    INFO: "INFO",
    WARN: "WARN",
    ERROR: "ERROR",
    FATAL: "FATAL",
}

_NAME_ALIASES: Final[dict[str, int]] = {
    "DEBUG": DEBUG,
    "INFO": INFO,
    "WARN": WARN,
    "WARNING": WARN,  # alias
    "ERROR": ERROR,
    "FATAL": FATAL,
    "CRITICAL": FATAL,  # alias
}


def is_valid_level(level: int) -> bool:
    return MIN_LEVEL <= level <= MAX_LEVEL


def level_name(level: int) -> str:
    """Return the canonical name for a numeric level.

    Raises:
        ValueError: If the level is outside 0..4.
    """
    try:
        return _LEVEL_NAMES[level]
    except KeyError:
        raise ValueError(
            f"Level must be {MIN_LEVEL}-{MAX_LEVEL}, got {level}"
        ) from None


def parse_level(value: int | str) -> int:
    """Accept a level number, a numeric string, or a level name.

    Raises:
        ValueError: If the value does not map to a known level.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid log level: {value!r}")
    if isinstance(value, int):
        level = value
    else:
        text = value.strip()
        if text.lstrip("-").isdigit():
            level = int(text)
        else:
            try:
                return _NAME_ALIASES[text.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {value!r}") from None
    if not is_valid_level(level):
        raise ValueError(f"Level must be {MIN_LEVEL}-{MAX_LEVEL}, got {level}")
    return level
