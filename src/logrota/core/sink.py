"""
LogSink: the record-emit path tying buffering and rotation together.

For every accepted record the sink asks the rotation policy whether the
active file is due, rotates through the executor when it is, and appends the
record to the write buffer. Rotation always flushes the buffer first so the
rotated snapshot contains every record emitted before it.

Lifecycle::

    UNINITIALIZED --(valid config, file ready)--> READY --(close / FATAL)--> TERMINATED

``TERMINATED`` is absorbing: the final flush has happened and nothing more is
written.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from types import TracebackType
from typing import Callable

from ..metrics.metrics import MetricsCollector
from ..rotation.executor import RotationExecutor, RotationKind, RotationResult
from ..rotation.policy import Clock, RotationPolicy, local_now
from ..rotation.retention import RetentionSweeper
from . import diagnostics, shutdown
from .buffer import WriteBuffer
from .errors import ConfigurationError, FatalLogEmitted
from .fs import FileSystem, LocalFileSystem
from .levels import FATAL, is_valid_level
from .settings import RotationStrategy, SinkConfig
from .sizes import format_size


class SinkState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class RotationStatusReport:
    enabled: bool
    type: str
    max_size: int
    keep_days: int
    current_size: int
    rotated_count: int

    def as_text(self) -> str:
        return "\n".join(
            [
                f"Rotation enabled: {str(self.enabled).lower()}",
                f"Rotation type: {self.type}",
                f"Max size: {format_size(self.max_size)}",
                f"Keep days: {self.keep_days}",
                f"Current size: {format_size(self.current_size)}",
                f"Rotated files: {self.rotated_count}",
            ]
        )


def validate_config(config: SinkConfig) -> None:
    """Re-check the invariants a sink relies on.

    ``SinkConfig`` validates on construction, but ``model_construct`` and
    ``model_copy(update=...)`` skip validation.

    Raises:
        ConfigurationError: If an invariant does not hold.
    """
    if not is_valid_level(config.min_level):
        raise ConfigurationError(
            f"Level must be 0-4, got {config.min_level}", field="min_level"
        )
    if not config.name or not config.name.strip():
        raise ConfigurationError("name must not be empty", field="name")
    if config.keep_days < 0:
        raise ConfigurationError("keep_days must be >= 0", field="keep_days")
    if config.buffer_capacity < 1:
        raise ConfigurationError(
            "buffer_capacity must be >= 1", field="buffer_capacity"
        )
    if config.strategy is RotationStrategy.SIZE and config.max_bytes <= 0:
        raise ConfigurationError(
            "max_bytes must be > 0 for size rotation", field="max_bytes"
        )


class LogSink:
    """Buffered, rotating file sink for pre-formatted records.

    - Never raises on runtime I/O failures; they go to diagnostics
    - Raises ``ConfigurationError`` from the constructor on invalid config
    - Raises ``FatalLogEmitted`` after flushing a FATAL record
    """

    def __init__(
        self,
        config: SinkConfig,
        *,
        fs: FileSystem | None = None,
        clock: Clock | None = None,
        time_source: Callable[[], float] = time.time,
        metrics: MetricsCollector | None = None,
        register_shutdown: bool = True,
    ) -> None:
        self._state = SinkState.UNINITIALIZED
        validate_config(config)
        self._config = config
        self._fs = fs or LocalFileSystem()
        self._clock = clock or local_now
        self._metrics = metrics or MetricsCollector(enabled=False)

        self._buffer = WriteBuffer(
            config.active_path,
            config.buffer_capacity,
            fs=self._fs,
            metrics=self._metrics,
        )
        self._policy = RotationPolicy(config, fs=self._fs, clock=self._clock)
        self._sweeper = RetentionSweeper(
            config, fs=self._fs, time_source=time_source, metrics=self._metrics
        )
        self._executor = RotationExecutor(
            config,
            flush=self._buffer.flush,
            fs=self._fs,
            clock=self._clock,
            sweeper=self._sweeper,
            metrics=self._metrics,
            still_due=self._policy.is_due,
            time_source=time_source,
        )

        self._prepare_active_file()
        self._state = SinkState.READY
        if register_shutdown:
            shutdown.register_sink(self)

    def _prepare_active_file(self) -> None:
        path = self._config.active_path
        if path is None:
            return
        try:
            self._fs.ensure_file(path)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create log file {path}: {e}", cause=e, path=str(path)
            ) from e

    # Introspection -------------------------------------------------------

    @property
    def config(self) -> SinkConfig:
        return self._config

    @property
    def state(self) -> SinkState:
        return self._state

    @property
    def buffer(self) -> WriteBuffer:
        return self._buffer

    @property
    def policy(self) -> RotationPolicy:
        return self._policy

    @property
    def executor(self) -> RotationExecutor:
        return self._executor

    @property
    def sweeper(self) -> RetentionSweeper:
        return self._sweeper

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    # Record path ---------------------------------------------------------

    def emit(self, level: int, record: str) -> bool:
        """Accept one formatted record at ``level``.

        Returns False when the sink is terminated or a triggered flush failed.
        Records below the minimum level are ignored and count as success.
        FATAL always raises ``FatalLogEmitted``, also on a terminated sink,
        where there is nothing left to flush.
        """
        if self._state is not SinkState.READY:
            if level >= FATAL:
                raise FatalLogEmitted(record)
            return False
        if level < self._config.min_level:
            return True

        if self._config.active_path is not None:
            if self._policy.is_due():
                self._executor.rotate(RotationKind.POLICY)
            ok = self._buffer.append(record)
        else:
            ok = True

        if level >= FATAL:
            self.close()
            raise FatalLogEmitted(record)
        return ok

    def flush(self) -> bool:
        if self._state is not SinkState.READY:
            return self._state is SinkState.TERMINATED
        return self._buffer.flush()

    def rotate_now(self) -> RotationResult:
        """Rotate immediately into ``<active>.manual.<timestamp>``."""
        return self._executor.rotate(RotationKind.MANUAL)

    def status(self) -> RotationStatusReport:
        cfg = self._config
        current_size = 0
        rotated_count = 0
        if cfg.active_path is not None:
            try:
                if self._fs.exists(cfg.active_path):
                    current_size = self._fs.size(cfg.active_path)
            except OSError:
                current_size = 0
            rotated_count = len(self._sweeper.candidates())
        return RotationStatusReport(
            enabled=cfg.rotation_enabled,
            type=cfg.strategy.value,
            max_size=cfg.max_bytes,
            keep_days=cfg.keep_days,
            current_size=current_size,
            rotated_count=rotated_count,
        )

    def close(self) -> bool:
        """Final flush and transition to ``TERMINATED``."""
        if self._state is SinkState.TERMINATED:
            return True
        ok = self._buffer.flush()
        if not ok:
            diagnostics.warn(
                "sink",
                "final flush failed; pending records lost",
                name=self._config.name,
                pending=len(self._buffer),
            )
        self._state = SinkState.TERMINATED
        shutdown.unregister_sink(self)
        return ok

    def __enter__(self) -> LogSink:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
