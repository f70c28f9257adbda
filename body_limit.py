"""Request body size guard.

Rejects oversized request bodies with 413 before any route runs. The declared
Content-Length is checked first; the streamed body is then buffered up to the
limit and replayed to the application, so chunked uploads are bounded too.
"""

from __future__ import annotations

import json
import logging

logger = logging.getLogger(__name__)

TOO_LARGE_MESSAGE = "Request data is too large. Reduce the amount of data and try again."


class BodySizeLimitMiddleware:
    def __init__(self, app, max_body_bytes: int) -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        declared = _content_length(scope)
        if declared is not None and declared > self.max_body_bytes:
            logger.warning("BODY LIMIT: declared length %d exceeds %d (%s)", declared, self.max_body_bytes, scope.get("path"))
            await _send_too_large(send)
            return

        chunks: list[bytes] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message.get("type") == "http.disconnect":
                return
            chunk = message.get("body", b"") or b""
            received += len(chunk)
            if received > self.max_body_bytes:
                logger.warning("BODY LIMIT: streamed body exceeds %d (%s)", self.max_body_bytes, scope.get("path"))
                await _send_too_large(send)
                return
            chunks.append(chunk)
            more_body = bool(message.get("more_body", False))

        body = b"".join(chunks)
        replayed = False

        async def replay():  # type: ignore[no-untyped-def]
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)


def _content_length(scope) -> int | None:  # type: ignore[no-untyped-def]
    for key, value in scope.get("headers") or []:
        if key.lower() == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


async def _send_too_large(send) -> None:  # type: ignore[no-untyped-def]
    payload = json.dumps({"success": False, "message": TOO_LARGE_MESSAGE}).encode("utf-8")
    await send(
        {
            "type": "http.response.start",
            "status": 413,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(payload)).encode("latin-1")),
            ],
        }
    )
    await send({"type": "http.response.body", "body": payload})


__all__ = ["BodySizeLimitMiddleware"]
