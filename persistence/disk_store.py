from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Iterable

from json_store import content_revision, dumps_json, preview, read_json

from .interfaces import ScheduleStore
from .locks import GLOBAL_PATH_LOCKS
from .paths import ensure_parent_dir
from .schedule_state import ScheduleDocument, default_document
from .write_strategies import DEFAULT_STRATEGIES, WriteResult, WriteStrategy

logger = logging.getLogger(__name__)


class WriteOutcome(str, enum.Enum):
    WRITTEN = "written"
    CONFLICT = "conflict"
    FAILED = "failed"


class DiskScheduleStore(ScheduleStore):
    """
    Stores the schedule document as one JSON file at a fixed path.

    - read() always returns a fully defaulted document (defaults on missing/invalid JSON).
    - write() tries each strategy in order and stops at the first success.
    """

    def __init__(self, path: Path, strategies: Iterable[WriteStrategy] = DEFAULT_STRATEGIES):
        self._path = path
        self._strategies = tuple(strategies)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> ScheduleDocument:
        lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        with lock:
            return self._load()

    def read_with_revision(self) -> tuple[ScheduleDocument, str]:
        doc = self.read()
        try:
            return doc, content_revision(doc.to_disk_doc())
        except (RecursionError, ValueError) as e:
            logger.warning("DATA LOAD: stored document at %s cannot be hashed: %r; using defaults", self._path, e)
            doc = default_document()
            return doc, content_revision(doc.to_disk_doc())

    def _load(self) -> ScheduleDocument:
        # JSONDecodeError and UnicodeDecodeError are ValueErrors; deep nesting raises RecursionError.
        try:
            raw = read_json(self._path)
        except (OSError, ValueError, RecursionError) as e:
            logger.warning("DATA LOAD: failed to load %s: %r; using defaults", self._path, e)
            return default_document()
        if raw is None:
            logger.info("DATA LOAD: %s missing or empty; using defaults", self._path)
            return default_document()
        return ScheduleDocument.from_disk_doc(raw)

    def write(self, doc: ScheduleDocument) -> bool:
        lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        with lock:
            return self._save(doc)

    def write_if_revision(self, doc: ScheduleDocument, expected_revision: str) -> WriteOutcome:
        """Write only when the stored document still has ``expected_revision``."""
        lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        with lock:
            _, current = self.read_with_revision()
            if current != expected_revision:
                logger.info("DATA SAVE: revision mismatch for %s (expected=%s current=%s)", self._path, expected_revision, current)
                return WriteOutcome.CONFLICT
            return WriteOutcome.WRITTEN if self._save(doc) else WriteOutcome.FAILED

    def _save(self, doc: ScheduleDocument) -> bool:
        try:
            text = dumps_json(doc.to_disk_doc())
        except (TypeError, ValueError, RecursionError) as e:
            logger.error("DATA SAVE: document for %s is not serializable: %r", self._path, e)
            return False
        payload = text.encode("utf-8")
        logger.info("DATA SAVE: start path=%s size=%.2fKB", self._path, len(payload) / 1024)
        logger.debug("DATA SAVE: preview %s", preview(text))

        try:
            ensure_parent_dir(self._path)
        except OSError as e:
            # Keep going; a strategy may still succeed if the directory appears.
            logger.warning("DATA SAVE: could not create %s: %r", self._path.parent, e)

        failures: list[WriteResult] = []
        for strategy in self._strategies:
            result = strategy(self._path, payload)
            if result.ok:
                logger.info("DATA SAVE: %s succeeded path=%s size=%d", result.strategy, self._path, len(payload))
                return True
            logger.warning(
                "DATA SAVE: %s failed path=%s size=%d error=%s",
                result.strategy,
                self._path,
                len(payload),
                result.error,
            )
            failures.append(result)

        logger.error(
            "DATA SAVE: all strategies failed path=%s errors=%s",
            self._path,
            {r.strategy: r.error for r in failures},
        )
        return False
