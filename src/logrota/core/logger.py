"""
Leveled logger facade over :class:`~logrota.core.sink.LogSink`.

The facade sanitises and renders each message, prints it to the console
(WARN and above to stderr), and hands the uncoloured rendering to the sink.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Any, Callable, TextIO

from ..metrics.metrics import MetricsCollector
from .errors import FatalLogEmitted
from .formatting import (
    caller_context,
    colorize,
    render_human,
    render_json,
    sanitize,
)
from .levels import DEBUG, ERROR, FATAL, INFO, WARN, level_name
from .settings import Settings, load_settings
from .sink import LogSink
from .sizes import format_size


def _is_tty(stream: TextIO) -> bool:
    try:
        return bool(stream.isatty())
    except Exception:
        return False


class Logger:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        sink: LogSink | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        clock: Callable[[], datetime] | None = None,
        console: bool = True,
    ) -> None:
        self._settings = settings or load_settings()
        self._stdout = stdout
        self._stderr = stderr
        self._clock = clock or datetime.now
        self._console = console
        if sink is None and self._settings.file:
            sink = LogSink(
                self._settings.to_sink_config(),
                metrics=MetricsCollector(enabled=self._settings.enable_metrics),
            )
        self._sink = sink

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def sink(self) -> LogSink | None:
        return self._sink

    @property
    def name(self) -> str:
        return self._settings.name

    def _render(self, level: int, message: Any) -> str:
        name = level_name(level)
        text = sanitize(message)
        context = caller_context() if self._settings.show_context else None
        now = self._clock()
        if self._settings.json_output:
            return render_json(name, text, now, name=self.name, context=context)
        return render_human(name, text, now, context=context)

    def _write_console(self, level: int, line: str) -> None:
        if not self._console:
            return
        if level >= WARN:
            stream = self._stderr or sys.stderr
        else:
            stream = self._stdout or sys.stdout
        colored = self._settings.use_color and not self._settings.json_output
        if colored and _is_tty(stream):
            line = colorize(level_name(level), line)
        try:
            stream.write(line + "\n")
            stream.flush()
        except Exception:
            # A closed console must not take the file sink down with it
            pass

    def log(self, level: int, message: Any) -> bool:
        if level < self._settings.level:
            return True
        line = self._render(level, message)
        self._write_console(level, line)
        if self._sink is not None:
            return self._sink.emit(level, line)
        if level >= FATAL:
            raise FatalLogEmitted(line)
        return True

    def debug(self, message: Any) -> bool:
        return self.log(DEBUG, message)

    def info(self, message: Any) -> bool:
        return self.log(INFO, message)

    def warn(self, message: Any) -> bool:
        return self.log(WARN, message)

    warning = warn

    def error(self, message: Any) -> bool:
        return self.log(ERROR, message)

    def fatal(self, message: Any) -> bool:
        """Log at FATAL, flush, and stop the process with exit status 1."""
        return self.log(FATAL, message)

    def flush(self) -> bool:
        if self._sink is None:
            return True
        return self._sink.flush()

    def rotate_now(self) -> Any:
        if self._sink is None:
            return None
        return self._sink.rotate_now()

    def rotation_status(self) -> str:
        if self._sink is None:
            return "Log file output disabled"
        return self._sink.status().as_text()

    def get_size(self) -> str:
        if self._sink is None:
            return format_size(0)
        return format_size(self._sink.status().current_size)

    def close(self) -> None:
        if self._sink is not None:
            self._sink.close()


def get_logger(
    name: str | None = None,
    *,
    settings: Settings | None = None,
) -> Logger:
    """Return a logger configured from ``LOG_*`` environment variables.

    Raises:
        ConfigurationError: If the environment holds an invalid value.
    """
    if settings is None:
        settings = load_settings(**({"name": name} if name else {}))
    elif name:
        settings = settings.model_copy(update={"name": name})
    return Logger(settings)
