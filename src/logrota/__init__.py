"""
Public entrypoints for logrota.

Buffered, rotating file logging for scripts and small processes::

    from logrota import get_logger

    logger = get_logger("backup")   # reads LOG_* from the environment
    logger.info("starting")
    logger.rotate_now()
"""

from __future__ import annotations

from ._version import __version__
from .core.errors import (
    ConfigurationError,
    FatalLogEmitted,
    InvalidSizeFormat,
    LockUnavailable,
    LogrotaError,
    SinkIOError,
)
from .core.logger import Logger, get_logger
from .core.settings import (
    RotationStrategy,
    Settings,
    SinkConfig,
    build_sink_config,
    load_settings,
)
from .core.sink import LogSink, RotationStatusReport, SinkState
from .core.sizes import format_size, parse_size
from .rotation.executor import RotationKind, RotationResult, RotationStatus

__all__ = [
    "__version__",
    "VERSION",
    "ConfigurationError",
    "FatalLogEmitted",
    "InvalidSizeFormat",
    "LockUnavailable",
    "LogrotaError",
    "SinkIOError",
    "Logger",
    "get_logger",
    "LogSink",
    "SinkState",
    "RotationStatusReport",
    "RotationStrategy",
    "Settings",
    "SinkConfig",
    "build_sink_config",
    "load_settings",
    "RotationKind",
    "RotationResult",
    "RotationStatus",
    "format_size",
    "parse_size",
]

VERSION = __version__
