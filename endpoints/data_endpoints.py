from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from endpoints.validation import CyclicReference, DocumentValidationError, validate_document
from json_store import content_revision
from persistence.disk_store import WriteOutcome
from persistence.repositories import AsyncScheduleRepository
from settings import Settings

router = APIRouter(tags=["data"])
logger = logging.getLogger(__name__)

# The document is mutable; clients and proxies must always re-fetch it.
NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

MSG_INVALID_JSON = "Request data is not valid JSON."
MSG_SAVE_FAILED = "Failed to save data. Please try again later."
MSG_SERVER_ERROR = "A server error occurred. Please try again later."
MSG_TIMEOUT = "The server timed out while processing the request. Please try again later."
MSG_CONFLICT = "The data was changed by someone else. Reload and try again."


def failure_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code, headers=headers)


def _etag(revision: str) -> str:
    return f'"{revision}"'


def _parse_if_match(value: str | None) -> str | None:
    """Return the expected revision, or None when no precondition applies."""
    if value is None:
        return None
    token = value.strip()
    if not token or token == "*":
        return None
    if token.startswith("W/"):
        token = token[2:]
    return token.strip('"')


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _repo(request: Request) -> AsyncScheduleRepository:
    return request.app.state.schedule_repo


def _settings(request: Request) -> Settings:
    return request.app.state.settings


@router.get("/api/data")
async def get_data(request: Request) -> JSONResponse:
    doc, revision = await _repo(request).read_with_revision()
    headers = dict(NO_CACHE_HEADERS)
    headers["ETag"] = _etag(revision)
    return JSONResponse(doc.to_disk_doc(), headers=headers)


@router.post("/api/data")
async def replace_data(request: Request) -> JSONResponse:
    started = time.perf_counter()
    settings = _settings(request)
    repo = _repo(request)

    if settings.debug_log_requests:
        logger.info(
            "DATA API: POST /api/data (ip=%s ua=%s)",
            _client_ip(request),
            request.headers.get("user-agent"),
        )

    body = await request.body()
    raw: Any = None
    if body.strip():
        try:
            raw = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("DATA API: invalid JSON body: %s", e)
            return failure_response(400, MSG_INVALID_JSON)
        except RecursionError:
            logger.warning("DATA API: body nested too deeply to parse (%d bytes)", len(body))
            return failure_response(400, CyclicReference().message)

    expected_revision = _parse_if_match(request.headers.get("if-match"))

    try:
        return await asyncio.wait_for(
            _replace(raw, repo, settings, expected_revision, started),
            timeout=settings.request_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error(
            "DATA API: request timed out after %.1fs; a write already in progress may still complete",
            settings.request_timeout_seconds,
        )
        return failure_response(503, MSG_TIMEOUT)
    except Exception:
        logger.exception("DATA API: unexpected failure while replacing data")
        return failure_response(500, MSG_SERVER_ERROR)


async def _replace(
    raw: Any,
    repo: AsyncScheduleRepository,
    settings: Settings,
    expected_revision: str | None,
    started: float,
) -> JSONResponse:
    # staffList inheritance reads the store, so validation runs off the event loop too.
    try:
        doc = await asyncio.to_thread(
            validate_document,
            raw,
            load_current=repo.store.read,
            max_bytes=settings.max_body_bytes,
        )
    except DocumentValidationError as e:
        logger.warning("DATA API: rejected (%s): %s", type(e).__name__, e.message)
        return failure_response(e.status_code, e.message)

    logger.info("DATA API: validation passed; saving")

    if expected_revision is None:
        outcome = WriteOutcome.WRITTEN if await repo.write(doc) else WriteOutcome.FAILED
    else:
        outcome = await repo.write_if_revision(doc, expected_revision)

    if outcome is WriteOutcome.CONFLICT:
        return failure_response(412, MSG_CONFLICT)
    if outcome is WriteOutcome.FAILED:
        logger.error("DATA API: save failed")
        return failure_response(500, MSG_SAVE_FAILED)

    processing_ms = int((time.perf_counter() - started) * 1000)
    logger.info("DATA API: saved (processing time: %dms)", processing_ms)

    headers = dict(NO_CACHE_HEADERS)
    headers["ETag"] = _etag(content_revision(doc.to_disk_doc()))
    return JSONResponse({"success": True, "processingTime": processing_ms}, headers=headers)
