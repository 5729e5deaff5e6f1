from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from ..core import diagnostics
from ..core.errors import SinkIOError
from ..core.fs import FileSystem, LocalFileSystem
from ..core.settings import SinkConfig
from ..metrics.metrics import MetricsCollector

SECONDS_PER_DAY = 86_400


class RetentionSweeper:
    """Deletes rotated files whose age exceeds ``keep_days``.

    ``keep_days == 0`` means keep forever. The active file and the lock
    marker are never candidates. Deletion failures are reported and the
    sweep moves on to the remaining files.
    """

    def __init__(
        self,
        config: SinkConfig,
        *,
        fs: FileSystem | None = None,
        time_source: Callable[[], float] = time.time,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._config = config
        self._fs = fs or LocalFileSystem()
        self._time = time_source
        self._metrics = metrics

    def candidates(self) -> list[Path]:
        path = self._config.active_path
        if path is None:
            return []
        try:
            return [p for p in self._fs.list_rotated(path) if p != path]
        except OSError as e:
            diagnostics.report(
                "retention",
                SinkIOError(
                    "could not enumerate rotated files", cause=e, path=str(path)
                ),
            )
            return []

    def sweep(self) -> list[Path]:
        keep_days = self._config.keep_days
        if keep_days <= 0:
            return []
        cutoff = self._time() - keep_days * SECONDS_PER_DAY
        removed: list[Path] = []
        for candidate in self.candidates():
            try:
                if self._fs.mtime(candidate) >= cutoff:
                    continue
                self._fs.remove(candidate)
            except FileNotFoundError:
                # Another process swept it first
                continue
            except OSError as e:
                diagnostics.report(
                    "retention",
                    SinkIOError(
                        "failed to delete rotated file",
                        cause=e,
                        path=str(candidate),
                    ),
                )
                continue
            removed.append(candidate)
        if self._metrics is not None:
            self._metrics.record_swept(len(removed))
        return removed
