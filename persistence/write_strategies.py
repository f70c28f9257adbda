from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    strategy: str
    ok: bool
    error: str | None = None


WriteStrategy = Callable[[Path, bytes], WriteResult]


def direct_overwrite(path: Path, payload: bytes) -> WriteResult:
    """
    Write straight to the canonical path. Fastest, but a crash mid-write can
    leave a truncated file (reads tolerate that by falling back to defaults).
    """
    try:
        path.write_bytes(payload)
    except OSError as e:
        return WriteResult("direct_overwrite", False, repr(e))
    return WriteResult("direct_overwrite", True)


def temp_path_for(path: Path) -> Path:
    # Same directory as the target so the rename never crosses filesystems.
    return path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")


def temp_file_rename(path: Path, payload: bytes) -> WriteResult:
    """
    Write to a uniquely named sibling file, fsync it, then atomically replace
    the canonical path. Until the rename lands the canonical file is untouched.
    """
    tmp_path = temp_path_for(path)
    try:
        with tmp_path.open("wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        _discard_temp(tmp_path)
        return WriteResult("temp_file_rename", False, repr(e))
    return WriteResult("temp_file_rename", True)


def fd_write(path: Path, payload: bytes) -> WriteResult:
    """
    Last resort using raw file descriptors. Not atomic; only here to get bytes
    onto storage where the higher-level calls are refused.
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
        try:
            view = memoryview(payload)
            while view:
                written = os.write(fd, view)
                view = view[written:]
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError as e:
        return WriteResult("fd_write", False, repr(e))
    return WriteResult("fd_write", True)


def _discard_temp(tmp_path: Path) -> None:
    try:
        tmp_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("DATA SAVE: could not remove temp file %s: %r", tmp_path, e)


DEFAULT_STRATEGIES: tuple[WriteStrategy, ...] = (direct_overwrite, temp_file_rename, fd_write)
