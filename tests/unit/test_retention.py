"""
Unit tests for the retention sweep over rotated files.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any

from logrota.core.settings import build_sink_config
from logrota.metrics.metrics import MetricsCollector
from logrota.rotation.retention import SECONDS_PER_DAY, RetentionSweeper
from logrota.testing import FaultyFileSystem


def _age(path: Path, days: float, now: float) -> Path:
    ts = now - days * SECONDS_PER_DAY
    path.touch(exist_ok=True)
    os.utime(path, (ts, ts))
    return path


def _make_files(log_path: Path, now: float) -> dict[str, Path]:
    log_path.write_text("active\n")
    files = {
        "old_daily": log_path.with_name("app.log.2025-01-01"),
        "old_manual": log_path.with_name("app.log.manual.20250101-000000"),
        "fresh": log_path.with_name("app.log.2025-03-06"),
        "unrelated": log_path.with_name("other.log.2025-01-01"),
    }
    for p in files.values():
        p.write_text("rotated\n")
    _age(files["old_daily"], 10, now)
    _age(files["old_manual"], 8, now)
    _age(files["fresh"], 2, now)
    _age(files["unrelated"], 30, now)
    _age(log_path, 30, now)
    return files


def _sweeper(log_path: Path, keep_days: int, now: float, **kwargs: Any):
    config = build_sink_config(active_path=log_path, keep_days=keep_days, name="t")
    return RetentionSweeper(config, time_source=lambda: now, **kwargs)


class TestSweep:
    def test_deletes_only_expired_rotated_files(self, log_path: Path) -> None:
        now = time.time()
        files = _make_files(log_path, now)
        metrics = MetricsCollector()

        removed = _sweeper(log_path, 7, now, metrics=metrics).sweep()

        assert sorted(removed) == sorted([files["old_daily"], files["old_manual"]])
        assert not files["old_daily"].exists()
        assert not files["old_manual"].exists()
        assert files["fresh"].exists()
        assert files["unrelated"].exists()
        assert log_path.exists()
        assert metrics.snapshot().files_swept == 2

    def test_keep_days_zero_keeps_everything(self, log_path: Path) -> None:
        now = time.time()
        files = _make_files(log_path, now)

        assert _sweeper(log_path, 0, now).sweep() == []
        assert all(p.exists() for p in files.values())

    def test_exactly_at_window_is_kept(self, log_path: Path) -> None:
        now = float(int(time.time()))
        log_path.write_text("")
        boundary = _age(log_path.with_name("app.log.2025-02-28"), 7, now)

        assert _sweeper(log_path, 7, now).sweep() == []
        assert boundary.exists()

    def test_lock_marker_never_swept(self, log_path: Path) -> None:
        now = time.time()
        log_path.write_text("")
        lock = _age(log_path.with_name("app.log.lock"), 30, now)
        claimed = _age(log_path.with_name("app.log.lock.4242-0a1b2c"), 30, now)

        assert _sweeper(log_path, 1, now).sweep() == []
        assert lock.exists()
        assert claimed.exists()

    def test_delete_failure_continues(
        self, log_path: Path, diagnostics_lines: list[dict[str, Any]]
    ) -> None:
        now = time.time()
        files = _make_files(log_path, now)
        fs = FaultyFileSystem(fail_on={"remove"}, fail_paths=("2025-01-01",))

        removed = _sweeper(log_path, 7, now, fs=fs).sweep()

        assert removed == [files["old_manual"]]
        assert files["old_daily"].exists()
        assert diagnostics_lines[-1]["component"] == "retention"
        assert diagnostics_lines[-1]["path"] == str(files["old_daily"])
        assert diagnostics_lines[-1]["error_type"] == "SinkIOError"

    def test_candidates_lists_rotated_files(self, log_path: Path) -> None:
        now = time.time()
        files = _make_files(log_path, now)

        candidates = _sweeper(log_path, 7, now).candidates()

        assert sorted(candidates) == sorted(
            [files["old_daily"], files["old_manual"], files["fresh"]]
        )
