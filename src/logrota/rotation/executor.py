"""Copy-and-truncate rotation guarded by a filesystem lock.

The lock is ``<active>.lock`` created with ``O_CREAT | O_EXCL``. One attempt
is made per rotation; a busy lock means another process is rotating and the
caller simply carries on appending to the current file. The next emission
re-evaluates whether rotation is still due.
"""

from __future__ import annotations

import os
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator

from ..core import diagnostics
from ..core.errors import LockUnavailable, SinkIOError
from ..core.fs import FileSystem, LocalFileSystem
from ..core.settings import SinkConfig
from ..metrics.metrics import MetricsCollector
from .policy import Clock, local_now, period_suffix, rotated_name
from .retention import RetentionSweeper

# Locks older than this are assumed to belong to a crashed process
STALE_LOCK_SECONDS = 600.0

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class RotationKind(str, Enum):
    POLICY = "policy"
    MANUAL = "manual"


class RotationStatus(str, Enum):
    ROTATED = "rotated"
    NOTHING_TO_ROTATE = "nothing_to_rotate"
    ALREADY_ROTATED = "already_rotated"
    LOCK_UNAVAILABLE = "lock_unavailable"
    FAILED = "failed"


@dataclass(frozen=True)
class RotationResult:
    status: RotationStatus
    path: Path | None = None

    @property
    def rotated(self) -> bool:
        return self.status is RotationStatus.ROTATED

    @property
    def ok(self) -> bool:
        return self.status is not RotationStatus.FAILED


def rotation_target(
    config: SinkConfig, kind: RotationKind, now: datetime
) -> Path | None:
    """Name of the file a rotation started at ``now`` would produce."""
    path = config.active_path
    if path is None:
        return None
    if kind is RotationKind.MANUAL:
        return rotated_name(path, f"manual.{now.strftime(TIMESTAMP_FORMAT)}")
    suffix = period_suffix(config.strategy, now)
    if suffix is None:
        suffix = now.strftime(TIMESTAMP_FORMAT)
    return rotated_name(path, suffix)


class RotationExecutor:
    """Performs one rotation at a time per target name.

    Args:
        config: Frozen sink configuration.
        flush: Flushes pending buffered records to the active file.
        still_due: Re-checked under the lock for policy rotations so that a
            rotation completed by another process is not repeated.
    """

    def __init__(
        self,
        config: SinkConfig,
        *,
        flush: Callable[[], bool],
        fs: FileSystem | None = None,
        clock: Clock | None = None,
        sweeper: RetentionSweeper | None = None,
        metrics: MetricsCollector | None = None,
        still_due: Callable[[], bool] | None = None,
        time_source: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._flush = flush
        self._fs = fs or LocalFileSystem()
        self._clock = clock or local_now
        self._sweeper = sweeper
        self._metrics = metrics
        self._still_due = still_due
        self._time = time_source

    @contextmanager
    def lock(self) -> Iterator[Path]:
        """Hold the rotation lock for the active file.

        Raises:
            LockUnavailable: If the lock marker already exists.
        """
        lock_path = self._config.lock_path
        if lock_path is None:
            raise LockUnavailable("no active file configured")
        if not self._fs.create_exclusive(lock_path):
            self._break_if_stale(lock_path)
            raise LockUnavailable(
                "rotation lock held by another writer", lock=str(lock_path)
            )
        try:
            yield lock_path
        finally:
            try:
                self._fs.remove(lock_path)
            except FileNotFoundError:
                pass
            except OSError as e:
                diagnostics.report(
                    "rotation",
                    SinkIOError(
                        "failed to release rotation lock",
                        cause=e,
                        path=str(lock_path),
                    ),
                )

    def _lock_age(self, path: Path) -> float | None:
        try:
            return self._time() - self._fs.mtime(path)
        except OSError:
            return None

    def _break_if_stale(self, lock_path: Path) -> None:
        """Remove a lock left behind by a crashed holder.

        The lock is first renamed to a name unique to this attempt, so at most
        one contender acts on a given lock file. If the renamed file turns out
        to be fresh (a new holder replaced the stale lock after the first
        check), it is linked back into place instead of being removed.
        This attempt still backs off; the next one can take the lock.
        """
        age = self._lock_age(lock_path)
        if age is None or age <= STALE_LOCK_SECONDS:
            return
        claimed = lock_path.with_name(
            f"{lock_path.name}.{os.getpid()}-{uuid.uuid4().hex[:12]}"
        )
        try:
            self._fs.rename(lock_path, claimed)
        except OSError:
            return
        age = self._lock_age(claimed)
        if age is None or age <= STALE_LOCK_SECONDS:
            self._restore_lock(claimed, lock_path)
            return
        try:
            self._fs.remove(claimed)
        except OSError:
            return
        diagnostics.warn(
            "rotation",
            "removed stale rotation lock",
            lock=str(lock_path),
            age_seconds=round(age, 1),
        )

    def _restore_lock(self, claimed: Path, lock_path: Path) -> None:
        try:
            self._fs.link(claimed, lock_path)
        except OSError:
            # A newer lock already exists, or hard links are unsupported
            pass
        try:
            self._fs.remove(claimed)
        except OSError:
            pass

    def rotate(self, kind: RotationKind = RotationKind.POLICY) -> RotationResult:
        result = self._rotate(RotationKind(kind))
        if self._metrics is not None:
            self._metrics.record_rotation(result.status.value)
        if result.rotated and self._sweeper is not None:
            self._sweeper.sweep()
        return result

    def _rotate(self, kind: RotationKind) -> RotationResult:
        active = self._config.active_path
        if active is None or not self._fs.exists(active):
            return RotationResult(RotationStatus.NOTHING_TO_ROTATE)

        target = rotation_target(self._config, kind, self._clock())
        if target is None:
            return RotationResult(RotationStatus.NOTHING_TO_ROTATE)

        try:
            with self.lock():
                if self._fs.exists(target):
                    return RotationResult(RotationStatus.ALREADY_ROTATED, target)
                if (
                    kind is RotationKind.POLICY
                    and self._still_due is not None
                    and not self._still_due()
                ):
                    return RotationResult(RotationStatus.ALREADY_ROTATED)
                self._flush()
                return self._copy_and_truncate(active, target)
        except LockUnavailable:
            return RotationResult(RotationStatus.LOCK_UNAVAILABLE)

    def _copy_and_truncate(self, active: Path, target: Path) -> RotationResult:
        try:
            self._fs.copy(active, target)
        except OSError as e:
            diagnostics.report(
                "rotation",
                SinkIOError(
                    "copy failed; active file left untouched",
                    cause=e,
                    path=str(active),
                    target=str(target),
                ),
            )
            self._discard_partial(target)
            return RotationResult(RotationStatus.FAILED)
        try:
            self._fs.truncate(active)
        except OSError as e:
            diagnostics.report(
                "rotation",
                SinkIOError(
                    "truncate failed after copy; content now duplicated",
                    cause=e,
                    path=str(active),
                    target=str(target),
                ),
            )
            return RotationResult(RotationStatus.FAILED, target)
        return RotationResult(RotationStatus.ROTATED, target)

    def _discard_partial(self, target: Path) -> None:
        try:
            if self._fs.exists(target):
                self._fs.remove(target)
        except OSError as e:
            diagnostics.report(
                "rotation",
                SinkIOError(
                    "failed to remove partial rotated file",
                    cause=e,
                    path=str(target),
                ),
            )
