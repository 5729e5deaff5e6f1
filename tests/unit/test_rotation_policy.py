"""
Unit tests for rotation due-ness and period suffixes.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from logrota.core.settings import RotationStrategy, build_sink_config
from logrota.rotation.policy import RotationPolicy, period_suffix, rotated_name
from logrota.testing import FixedClock


def _policy(path: Path, clock: FixedClock | None = None, **overrides: object):
    values: dict[str, object] = {
        "active_path": path,
        "rotation_enabled": True,
        "strategy": "daily",
        "name": "t",
    }
    values.update(overrides)
    return RotationPolicy(build_sink_config(**values), clock=clock)


class TestPeriodSuffix:
    NOW = datetime(2025, 3, 7, 14, 5, 9)

    @pytest.mark.parametrize(
        ("strategy", "expected"),
        [
            ("hourly", "2025-03-07-14"),
            ("daily", "2025-03-07"),
            ("weekly", "2025-W10"),
            ("monthly", "2025-03"),
        ],
    )
    def test_time_suffixes(self, strategy: str, expected: str) -> None:
        assert period_suffix(strategy, self.NOW) == expected

    def test_iso_week_year_boundary(self) -> None:
        # 2024-12-30 belongs to ISO week 1 of 2025
        assert period_suffix("weekly", datetime(2024, 12, 30)) == "2025-W01"

    @pytest.mark.parametrize("strategy", ["size", "none", "yearly"])
    def test_non_time_strategies(self, strategy: str) -> None:
        assert period_suffix(strategy, self.NOW) is None

    def test_accepts_enum(self) -> None:
        assert period_suffix(RotationStrategy.MONTHLY, self.NOW) == "2025-03"


class TestSizePolicy:
    def test_due_only_when_strictly_greater(self, log_path: Path) -> None:
        policy = _policy(log_path, strategy="size", max_bytes=10)

        log_path.write_bytes(b"x" * 10)
        assert policy.is_due() is False

        log_path.write_bytes(b"x" * 11)
        assert policy.is_due() is True

    def test_not_due_without_file(self, log_path: Path) -> None:
        policy = _policy(log_path, strategy="size", max_bytes=1)

        assert policy.is_due() is False


class TestTimePolicy:
    def test_due_until_period_file_exists(self, log_path: Path) -> None:
        clock = FixedClock(datetime(2025, 3, 7, 9, 0, 0))
        policy = _policy(log_path, clock)
        log_path.write_text("content\n")

        assert policy.is_due() is True

        rotated_name(log_path, "2025-03-07").write_text("content\n")
        assert policy.is_due() is False

        clock.advance(hours=10)
        assert policy.is_due() is False

        clock.advance(days=1)
        assert policy.current_suffix() == "2025-03-08"
        assert policy.is_due() is True

    def test_hourly(self, log_path: Path) -> None:
        clock = FixedClock(datetime(2025, 3, 7, 9, 59, 59))
        policy = _policy(log_path, clock, strategy="hourly")
        log_path.write_text("x\n")
        rotated_name(log_path, "2025-03-07-09").write_text("x\n")

        assert policy.is_due() is False
        clock.advance(seconds=1)
        assert policy.is_due() is True

    def test_two_processes_agree(self, log_path: Path) -> None:
        clock = FixedClock(datetime(2025, 3, 7, 9, 0, 0))
        first = _policy(log_path, clock)
        second = _policy(log_path, clock)
        log_path.write_text("x\n")

        assert first.is_due() and second.is_due()
        rotated_name(log_path, "2025-03-07").write_text("x\n")
        assert not first.is_due() and not second.is_due()


class TestNeverDue:
    def test_rotation_disabled(self, log_path: Path) -> None:
        log_path.write_text("x" * 100)
        policy = _policy(
            log_path, rotation_enabled=False, strategy="size", max_bytes=1
        )

        assert policy.is_due() is False

    def test_strategy_none(self, log_path: Path) -> None:
        log_path.write_text("x\n")

        assert _policy(log_path, strategy="none").is_due() is False

    def test_no_active_path(self) -> None:
        policy = RotationPolicy(
            build_sink_config(rotation_enabled=True, strategy="daily", name="t")
        )

        assert policy.is_due() is False
