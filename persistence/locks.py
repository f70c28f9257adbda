from __future__ import annotations

import threading
from pathlib import Path


class PathLockRegistry:
    """
    Hands out one reentrant lock per resolved data file path.

    The revision check in write_if_revision re-enters the lock it already holds
    before saving.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def lock_for(self, path: Path) -> threading.RLock:
        key = str(path.resolve())
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock


GLOBAL_PATH_LOCKS = PathLockRegistry()
