"""A lock file that marks the graphical application as running."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from dupfind.settings import data_dir

INSTANCE_LOCK_NAME = "DupFind_GUI_Instance.lock"


def default_lock_path() -> Path:
    return data_dir() / INSTANCE_LOCK_NAME


class InstanceFlag:
    """Held by the running GUI so background scans can tell to stand aside."""

    def __init__(self, path=None):
        self.path = Path(path) if path is not None else default_lock_path()
        self._lock = FileLock(str(self.path))

    @property
    def held(self) -> bool:
        return self._lock.is_locked

    def acquire(self) -> bool:
        """Take the flag without waiting; return whether this object now holds it."""
        if self._lock.is_locked:
            return True
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._lock.acquire(timeout=0)
        except Timeout:
            return False
        return True

    def release(self) -> None:
        if self._lock.is_locked:
            self._lock.release(force=True)

    def is_running(self) -> bool:
        """Whether the flag is held, by this object or by anyone else."""
        if self._lock.is_locked:
            return True
        if not self.path.parent.exists():
            return False
        probe = FileLock(str(self.path))
        try:
            probe.acquire(timeout=0)
        except Timeout:
            return True
        except OSError:
            return False
        probe.release(force=True)
        return False

    def __enter__(self) -> "InstanceFlag":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()