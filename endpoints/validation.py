from __future__ import annotations

import logging
from typing import Any, Callable

from json_store import deep_copy_json, serialized_size
from persistence.schedule_state import (
    DEFAULT_MASTER_PASSWORD,
    ScheduleDocument,
    is_staff_list,
)
from settings import DEFAULT_MAX_BODY_BYTES

logger = logging.getLogger(__name__)


class DocumentValidationError(Exception):
    """Inbound document rejected; ``message`` is safe to show to clients."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingBody(DocumentValidationError):
    def __init__(self) -> None:
        super().__init__("Request body is empty.")


class TooLarge(DocumentValidationError):
    status_code = 413

    def __init__(self, size: int, limit: int):
        super().__init__("Request data is too large. Reduce the amount of data and try again.")
        self.size = size
        self.limit = limit


class MissingField(DocumentValidationError):
    def __init__(self, field: str):
        super().__init__(f"Invalid data format: the {field} property is required.")
        self.field = field


class WrongType(DocumentValidationError):
    def __init__(self, field: str, expected: str):
        super().__init__(f"{field} must be {expected}.")
        self.field = field


class CyclicReference(DocumentValidationError):
    def __init__(self) -> None:
        super().__init__("The data contains circular references or values that cannot be stored.")


def validate_document(
    raw: Any,
    *,
    load_current: Callable[[], ScheduleDocument],
    max_bytes: int = DEFAULT_MAX_BODY_BYTES,
) -> ScheduleDocument:
    """
    Normalize an inbound document or raise a DocumentValidationError.

    Only the top-level shape is checked; meeting entries pass through untouched.
    ``load_current`` is called only when staffList has to be inherited from the
    stored document.
    """
    if raw is None:
        raise MissingBody()

    # Size first, so the structural checks never run on oversized input.
    try:
        size = serialized_size(raw)
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning("DATA API: body could not be serialized while measuring: %r", e)
        raise CyclicReference() from e
    logger.info("DATA API: received %.2fKB", size / 1024)
    if size > max_bytes:
        logger.warning("DATA API: body too large size=%d limit=%d", size, max_bytes)
        raise TooLarge(size, max_bytes)

    if not isinstance(raw, dict):
        raise WrongType("body", "a JSON object")

    if raw.get("meetings") is None:
        logger.warning("DATA API: meetings missing; keys=%s", sorted(raw.keys()))
        raise MissingField("meetings")
    if not isinstance(raw["meetings"], list):
        logger.warning("DATA API: meetings is %s, not a list", type(raw["meetings"]).__name__)
        raise WrongType("meetings", "an array")

    try:
        copied = deep_copy_json(raw)
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning("DATA API: deep copy probe failed: %r", e)
        raise CyclicReference() from e

    staff = copied.get("staffList")
    if staff is None:
        staff = load_current().staffList
        logger.info("DATA API: staffList missing; inherited %d names from stored data", len(staff))
    elif not is_staff_list(staff):
        raise WrongType("staffList", "a non-empty array of strings")

    password = copied.get("masterPassword")
    if password is None or password == "":
        logger.info("DATA API: masterPassword missing; using default")
        password = DEFAULT_MASTER_PASSWORD
    elif not isinstance(password, str):
        raise WrongType("masterPassword", "a string")

    return ScheduleDocument(meetings=copied["meetings"], staffList=staff, masterPassword=password)
