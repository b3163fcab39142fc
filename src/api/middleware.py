"""Outbound middleware: CORS and request ids on every response.

Written as a plain ASGI middleware rather than ``BaseHTTPMiddleware`` so the
long-lived SSE responses of ``GET /mcp`` and ``GET /sse`` pass through
untouched, one chunk at a time.
"""

from __future__ import annotations

import json
import logging
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.errors import InternalFault, error_document

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, DELETE, OPTIONS",
    "access-control-allow-headers": (
        "Content-Type, Accept, Authorization, mcp-session-id, "
        "mcp-protocol-version, Last-Event-ID, X-Request-ID"
    ),
    "access-control-expose-headers": "mcp-session-id, X-Request-ID",
}
PREFLIGHT_MAX_AGE = "86400"
REQUEST_ID_HEADER = "X-Request-ID"


class StandardHeadersMiddleware:
    """Attach CORS headers and an ``X-Request-ID`` to every HTTP response.

    * ``OPTIONS`` preflights are answered here with ``204``.
    * A client-supplied ``X-Request-ID`` is echoed, otherwise one is generated
      and exposed to handlers as ``request.state.request_id``.
    * An exception escaping the app becomes a JSON-RPC internal error, if
      the response has not started yet.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id
        logger.info("[%s] %s %s", request_id, scope["method"], scope["path"])

        if scope["method"] == "OPTIONS":
            headers = [(k.encode(), v.encode()) for k, v in CORS_HEADERS.items()]
            headers.append((b"access-control-max-age", PREFLIGHT_MAX_AGE.encode()))
            headers.append((REQUEST_ID_HEADER.lower().encode(), request_id.encode()))
            await send({"type": "http.response.start", "status": 204, "headers": headers})
            await send({"type": "http.response.body", "body": b""})
            return

        response_started = False

        async def send_with_headers(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                headers = MutableHeaders(scope=message)
                for key, value in CORS_HEADERS.items():
                    headers[key] = value
                headers[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_headers)
        except Exception:
            if response_started:
                logger.exception("[%s] Failure after the response started", request_id)
                return
            logger.exception("[%s] Unhandled error", request_id)
            body = json.dumps(error_document(InternalFault())).encode()
            await send_with_headers(
                {
                    "type": "http.response.start",
                    "status": 500,
                    "headers": [
                        (b"content-type", b"application/json"),
                        (b"content-length", str(len(body)).encode()),
                    ],
                }
            )
            await send({"type": "http.response.body", "body": body})
