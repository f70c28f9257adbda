from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_MASTER_PASSWORD = "admin123"

DEFAULT_STAFF_LIST: tuple[str, ...] = (
    "土谷順彦",
    "内藤　整",
    "西田隼人",
    "八木真由",
    "山岸敦史",
    "成澤貴史",
    "福原宏樹",
    "髙井優季",
    "末永信太",
    "伊藤　英",
    "深井惇史",
    "堀　聡美",
    "佐々木有貴",
)


def default_staff_list() -> list[str]:
    return list(DEFAULT_STAFF_LIST)


def is_staff_list(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(v, str) for v in value)


class ScheduleDocument(BaseModel):
    """
    Mirrors the on-disk data.json schema exactly:
      {
        "meetings": [ <opaque meeting>, ... ],
        "staffList": [ "<name>", ... ],
        "masterPassword": "<string>"
      }

    Meetings are caller-owned values and are never inspected.
    """

    model_config = ConfigDict(extra="ignore")

    meetings: list[Any] = Field(default_factory=list)
    staffList: list[str] = Field(default_factory=default_staff_list)
    masterPassword: str = DEFAULT_MASTER_PASSWORD

    @classmethod
    def from_disk_doc(cls, doc: Any) -> "ScheduleDocument":
        """
        Lenient restore: any missing or malformed top-level field falls back to
        its default instead of failing the read.
        """
        if not isinstance(doc, Mapping):
            logger.warning("DATA LOAD: stored value is %s, not an object; using defaults", type(doc).__name__)
            return default_document()

        meetings = doc.get("meetings")
        if not isinstance(meetings, list):
            logger.warning("DATA LOAD: meetings missing or not a list; initialising empty")
            meetings = []

        staff = doc.get("staffList")
        if not is_staff_list(staff):
            logger.warning("DATA LOAD: staffList missing or invalid; using default roster")
            staff = default_staff_list()

        password = doc.get("masterPassword")
        if not isinstance(password, str) or not password:
            logger.warning("DATA LOAD: masterPassword missing or invalid; using default")
            password = DEFAULT_MASTER_PASSWORD

        return cls(meetings=meetings, staffList=staff, masterPassword=password)

    def to_disk_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def default_document() -> ScheduleDocument:
    """The fallback for fresh installs, unreadable storage and missing fields."""
    return ScheduleDocument(meetings=[], staffList=default_staff_list(), masterPassword=DEFAULT_MASTER_PASSWORD)
