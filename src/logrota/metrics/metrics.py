"""
Prometheus-compatible counters for the write buffer and rotation engine.

Design goals:
- Instances are sink-scoped with an isolated registry; no global registration
- Safe no-op behaviour for the exporters when metrics are disabled
- In-memory counters are always tracked so tests can assert on them
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Any

from prometheus_client import CollectorRegistry, Counter


@dataclass
class SinkMetrics:
    """Captured runtime counters for quick assertions in tests."""

    records_written: int = 0
    flushes: int = 0
    flush_failures: int = 0
    rotations: int = 0
    rotations_skipped: int = 0
    rotation_failures: int = 0
    files_swept: int = 0
    records_dropped: int = 0


class MetricsCollector:
    """Sink-scoped metrics collector.

    When disabled, only the in-memory ``SinkMetrics`` counters move.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = SinkMetrics()

        self._c_records: Any | None = None
        self._c_flushes: Any | None = None
        self._c_rotations: Any | None = None
        self._c_swept: Any | None = None
        self._c_dropped: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            self._registry = CollectorRegistry()
            self._c_records = Counter(
                "logrota_records_written_total",
                "Total number of records appended to the active file",
                registry=self._registry,
            )
            self._c_flushes = Counter(
                "logrota_flushes_total",
                "Buffer flushes by outcome",
                ["outcome"],
                registry=self._registry,
            )
            self._c_rotations = Counter(
                "logrota_rotations_total",
                "Rotation attempts by outcome",
                ["outcome"],
                registry=self._registry,
            )
            self._c_swept = Counter(
                "logrota_rotated_files_swept_total",
                "Rotated files deleted by the retention sweep",
                registry=self._registry,
            )
            self._c_dropped = Counter(
                "logrota_records_dropped_total",
                "Oldest pending records discarded while writes kept failing",
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_flush(self, *, records: int, ok: bool) -> None:
        with self._lock:
            if ok:
                self._state.flushes += 1
                self._state.records_written += records
            else:
                self._state.flush_failures += 1
        if not self._enabled:
            return
        if self._c_flushes is not None:
            self._c_flushes.labels(outcome="ok" if ok else "error").inc()
        if ok and self._c_records is not None:
            self._c_records.inc(records)

    def record_rotation(self, outcome: str) -> None:
        with self._lock:
            if outcome == "rotated":
                self._state.rotations += 1
            elif outcome == "failed":
                self._state.rotation_failures += 1
            else:
                self._state.rotations_skipped += 1
        if self._enabled and self._c_rotations is not None:
            self._c_rotations.labels(outcome=outcome).inc()

    def record_swept(self, count: int) -> None:
        if count <= 0:
            return
        with self._lock:
            self._state.files_swept += count
        if self._enabled and self._c_swept is not None:
            self._c_swept.inc(count)

    def record_dropped(self, count: int) -> None:
        if count <= 0:
            return
        with self._lock:
            self._state.records_dropped += count
        if self._enabled and self._c_dropped is not None:
            self._c_dropped.inc(count)

    def snapshot(self) -> SinkMetrics:
        with self._lock:
            return replace(self._state)
