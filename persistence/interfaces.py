from __future__ import annotations

from typing import Protocol

from .schedule_state import ScheduleDocument


class ScheduleStore(Protocol):
    """
    Minimal DB-friendly interface: the single schedule document persisted at one location.
    """

    def read(self) -> ScheduleDocument:
        """Load and return the full document (never raises; defaults on any fault)."""
        ...

    def write(self, doc: ScheduleDocument) -> bool:
        """Persist the full document; False once every write path has failed."""
        ...
