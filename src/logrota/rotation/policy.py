"""Rotation due-ness decisions.

Time-based strategies look at the filesystem rather than in-memory state:
a period is considered rotated once ``<active>.<suffix>`` exists on disk.
Two processes sharing one log file therefore reach the same answer.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable

from ..core.fs import FileSystem, LocalFileSystem
from ..core.settings import RotationStrategy, SinkConfig

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Local wall-clock time; period boundaries follow the host timezone."""
    return datetime.now()


def period_suffix(strategy: RotationStrategy | str, now: datetime) -> str | None:
    """Return the suffix naming the period containing ``now``.

    Returns ``None`` for strategies that are not time-based.
    """
    try:
        strategy = RotationStrategy(strategy)
    except ValueError:
        return None
    if strategy is RotationStrategy.HOURLY:
        return now.strftime("%Y-%m-%d-%H")
    if strategy is RotationStrategy.DAILY:
        return now.strftime("%Y-%m-%d")
    if strategy is RotationStrategy.WEEKLY:
        iso_year, iso_week, _ = now.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"
    if strategy is RotationStrategy.MONTHLY:
        return now.strftime("%Y-%m")
    return None


def rotated_name(active_path: Path, suffix: str) -> Path:
    return active_path.with_name(f"{active_path.name}.{suffix}")


class RotationPolicy:
    def __init__(
        self,
        config: SinkConfig,
        *,
        fs: FileSystem | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config
        self._fs = fs or LocalFileSystem()
        self._clock = clock or local_now

    @property
    def strategy(self) -> RotationStrategy:
        return self._config.strategy

    def current_suffix(self) -> str | None:
        return period_suffix(self._config.strategy, self._clock())

    def is_due(self) -> bool:
        cfg = self._config
        path = cfg.active_path
        if not cfg.rotation_enabled or path is None:
            return False
        try:
            if not self._fs.exists(path):
                return False
            if cfg.strategy is RotationStrategy.SIZE:
                return self._fs.size(path) > cfg.max_bytes
            suffix = self.current_suffix()
            if suffix is None:
                return False
            return not self._fs.exists(rotated_name(path, suffix))
        except OSError:
            # An unreadable file is not a reason to rotate; the flush path reports it
            return False
