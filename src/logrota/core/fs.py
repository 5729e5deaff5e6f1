"""Filesystem primitives used by the buffer, the rotation policy and the
rotation executor.

All cross-process coordination goes through these calls: the exclusive-create
lock and the rotated-file existence check. The protocol lets tests inject
faults without patching ``os``.
"""

from __future__ import annotations

import glob
import os
import shutil
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class FileSystem(Protocol):
    def exists(self, path: Path) -> bool: ...

    def size(self, path: Path) -> int: ...

    def mtime(self, path: Path) -> float: ...

    def ensure_file(self, path: Path) -> None: ...

    def append(self, path: Path, data: bytes) -> None: ...

    def copy(self, src: Path, dst: Path) -> None: ...

    def truncate(self, path: Path) -> None: ...

    def create_exclusive(self, path: Path) -> bool: ...

    def remove(self, path: Path) -> None: ...

    def rename(self, src: Path, dst: Path) -> None: ...

    def link(self, src: Path, dst: Path) -> None: ...

    def list_rotated(self, active_path: Path) -> list[Path]: ...


class LocalFileSystem:
    """``FileSystem`` backed by the local disk."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def size(self, path: Path) -> int:
        return path.stat().st_size

    def mtime(self, path: Path) -> float:
        return path.stat().st_mtime

    def ensure_file(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Append mode creates without clobbering content written by others
        with open(path, "ab"):
            pass

    def append(self, path: Path, data: bytes) -> None:
        with open(path, "ab") as f:
            f.write(data)
            f.flush()

    def copy(self, src: Path, dst: Path) -> None:
        shutil.copyfile(src, dst)

    def truncate(self, path: Path) -> None:
        # Truncate in place so the inode (and any tail -f) survives
        os.truncate(path, 0)

    def create_exclusive(self, path: Path) -> bool:
        try:
            fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
        finally:
            os.close(fd)
        return True

    def remove(self, path: Path) -> None:
        path.unlink()

    def rename(self, src: Path, dst: Path) -> None:
        os.rename(src, dst)

    def link(self, src: Path, dst: Path) -> None:
        # Fails with FileExistsError instead of replacing dst
        os.link(src, dst)

    def list_rotated(self, active_path: Path) -> list[Path]:
        pattern = os.path.join(
            glob.escape(str(active_path.parent)), glob.escape(active_path.name) + ".*"
        )
        lock_name = active_path.name + ".lock"
        return sorted(
            Path(p)
            for p in glob.glob(pattern)
            if os.path.isfile(p)
            and not _is_lock_file(os.path.basename(p), lock_name)
        )


def _is_lock_file(name: str, lock_name: str) -> bool:
    # Includes stale locks claimed for removal: <active>.lock.<token>
    return name == lock_name or name.startswith(lock_name + ".")


__all__ = ["FileSystem", "LocalFileSystem"]
