from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

PREVIEW_CHARS = 200


def read_json(path: Path) -> Any | None:
    """
    Read JSON from disk.

    Returns None for missing or empty files. Unreadable files and invalid
    JSON raise (OSError / UnicodeDecodeError / json.JSONDecodeError) so the
    caller decides how to recover and what to log.
    """
    if not path.exists():
        return None
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return None
    return json.loads(raw)


def dumps_json(payload: Any, *, indent: int | None = 2) -> str:
    """
    Serialize to the on-disk text form. Non-ASCII (staff names) is kept as-is;
    NaN/Infinity are rejected because they are not valid JSON.
    """
    return json.dumps(payload, indent=indent, ensure_ascii=False, allow_nan=False)


def serialized_size(payload: Any) -> int:
    """UTF-8 byte length of the compact serialization."""
    text = json.dumps(payload, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    return len(text.encode("utf-8"))


def deep_copy_json(payload: Any) -> Any:
    """Serialize/deserialize round trip; raises on cycles or unserializable values."""
    return json.loads(json.dumps(payload, allow_nan=False))


def content_revision(payload: Any) -> str:
    canonical = json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
