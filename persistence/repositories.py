from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol

from .disk_store import DiskScheduleStore, WriteOutcome
from .interfaces import ScheduleStore
from .schedule_state import ScheduleDocument


class AsyncScheduleRepository(Protocol):
    @property
    def store(self) -> ScheduleStore: ...

    async def read(self) -> ScheduleDocument: ...
    async def read_with_revision(self) -> tuple[ScheduleDocument, str]: ...
    async def write(self, doc: ScheduleDocument) -> bool: ...
    async def write_if_revision(self, doc: ScheduleDocument, expected_revision: str) -> WriteOutcome: ...


class AsyncDiskScheduleRepository(AsyncScheduleRepository):
    """
    Async wrapper around the disk-backed schedule store.
    Uses asyncio.to_thread to avoid blocking the event loop on file I/O.

    A cancelled await does not stop the worker thread: a write already handed
    to the store still completes.
    """

    def __init__(self, path: Path) -> None:
        self._store = DiskScheduleStore(path)

    @property
    def store(self) -> DiskScheduleStore:
        return self._store

    async def read(self) -> ScheduleDocument:
        return await asyncio.to_thread(self._store.read)

    async def read_with_revision(self) -> tuple[ScheduleDocument, str]:
        return await asyncio.to_thread(self._store.read_with_revision)

    async def write(self, doc: ScheduleDocument) -> bool:
        return await asyncio.to_thread(self._store.write, doc)

    async def write_if_revision(self, doc: ScheduleDocument, expected_revision: str) -> WriteOutcome:
        return await asyncio.to_thread(self._store.write_if_revision, doc, expected_revision)
