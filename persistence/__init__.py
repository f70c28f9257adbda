from __future__ import annotations

from .disk_store import DiskScheduleStore, WriteOutcome
from .interfaces import ScheduleStore
from .repositories import AsyncDiskScheduleRepository, AsyncScheduleRepository
from .schedule_state import (
    DEFAULT_MASTER_PASSWORD,
    DEFAULT_STAFF_LIST,
    ScheduleDocument,
    default_document,
)

__all__ = [
    "DEFAULT_MASTER_PASSWORD",
    "DEFAULT_STAFF_LIST",
    "ScheduleDocument",
    "default_document",
    "ScheduleStore",
    "DiskScheduleStore",
    "WriteOutcome",
    "AsyncScheduleRepository",
    "AsyncDiskScheduleRepository",
]
