"""
Testing utilities for code that logs through logrota.

Example:
    from logrota.testing import FaultyFileSystem, FixedClock

    def test_flush_failure_keeps_records(tmp_path):
        fs = FaultyFileSystem(fail_on={"append"})
        ...
"""

from .mocks import FaultyFileSystem, FixedClock, RecordingFileSystem

__all__ = [
    "FaultyFileSystem",
    "FixedClock",
    "RecordingFileSystem",
]
