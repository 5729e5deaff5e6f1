from __future__ import annotations

from pathlib import Path

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .errors import SinkIOError
from .fs import FileSystem, LocalFileSystem

# Records held while writes keep failing, as a multiple of the capacity
OVERFLOW_FACTOR = 10


class WriteBuffer:
    """In-memory batch of formatted records destined for the active file.

    - Records keep their insertion order and are written one per line
    - Every ``capacity`` appends trigger an implicit flush
    - A failed flush keeps the records so a later flush can retry
    - While writes keep failing at most ``max_pending`` records are held;
      beyond that the oldest are dropped
    - Never raises upstream; failures go to the diagnostics channel, once
      per failure streak
    """

    def __init__(
        self,
        active_path: Path | None,
        capacity: int,
        *,
        fs: FileSystem | None = None,
        metrics: MetricsCollector | None = None,
        max_pending: int | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if max_pending is None:
            max_pending = capacity * OVERFLOW_FACTOR
        if max_pending < capacity:
            raise ValueError("max_pending must be >= capacity")
        self._path = active_path
        self._capacity = capacity
        self._max_pending = max_pending
        self._fs = fs or LocalFileSystem()
        self._metrics = metrics
        self._pending: list[str] = []
        self._since_flush = 0
        self._failing = False
        self._streak_dropped = 0
        self._dropped = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def max_pending(self) -> int:
        return self._max_pending

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(self._pending)

    @property
    def dropped(self) -> int:
        """Records discarded over the buffer's lifetime."""
        return self._dropped

    def __len__(self) -> int:
        return len(self._pending)

    def append(self, record: str) -> bool:
        """Buffer one record; returns the flush outcome when one was triggered."""
        self._pending.append(record)
        self._since_flush += 1
        overflow = len(self._pending) - self._max_pending
        if overflow > 0:
            self._drop_oldest(overflow)
        if self._since_flush >= self._capacity:
            return self.flush()
        return True

    def _drop_oldest(self, count: int) -> None:
        del self._pending[:count]
        if self._streak_dropped == 0:
            diagnostics.warn(
                "buffer",
                "buffer full while writes fail; dropping oldest records",
                path=str(self._path),
                max_pending=self._max_pending,
            )
        self._streak_dropped += count
        self._dropped += count
        if self._metrics is not None:
            self._metrics.record_dropped(count)

    def flush(self) -> bool:
        self._since_flush = 0
        if self._path is None or not self._pending:
            return True
        batch = self._pending[:]
        data = "".join(f"{line}\n" for line in batch).encode("utf-8", errors="replace")
        try:
            self._fs.append(self._path, data)
        except Exception as e:
            if not self._failing:
                self._failing = True
                diagnostics.report(
                    "buffer",
                    SinkIOError(
                        "flush failed; records kept for retry",
                        cause=e,
                        path=str(self._path),
                    ),
                    pending=len(batch),
                )
            if self._metrics is not None:
                self._metrics.record_flush(records=len(batch), ok=False)
            return False
        del self._pending[: len(batch)]
        if self._failing:
            self._failing = False
            diagnostics.warn(
                "buffer",
                "writes recovered",
                path=str(self._path),
                dropped=self._streak_dropped,
            )
            self._streak_dropped = 0
        if self._metrics is not None:
            self._metrics.record_flush(records=len(batch), ok=True)
        return True
