"""Streamable HTTP transport: ``POST``/``GET``/``DELETE /mcp``.

Every session has its own ``StreamableHTTPServerTransport`` from the MCP
SDK; this module only decides *which* one handles a request:

* ``POST`` without an ``mcp-session-id`` header creates a session; the SDK
  returns the new id in the ``mcp-session-id`` response header.  If the
  transport refuses the request (not an ``initialize``, invalid JSON, ...)
  the fresh session is dropped again.
* ``POST`` / ``GET`` / ``DELETE`` with a known id go to that session's
  transport.  ``GET`` opens its SSE stream and ``DELETE`` terminates it.

A missing or unknown id where one is required is answered with HTTP 200
and a JSON-RPC ``-32000`` error; nothing else happens.  Ids are only ever
generated by the session manager; a client-supplied unknown id is never
adopted.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from starlette.types import Message, Receive, Scope, Send

from src.api.routes import get_session_manager, protocol_error
from src.errors import SessionNotFound
from src.sessions import SessionFamily

logger = logging.getLogger(__name__)

MCP_SESSION_ID_HEADER = "mcp-session-id"

FAMILY = SessionFamily.STREAMABLE_HTTP


class StreamableHTTPEndpoint:
    """ASGI endpoint routing ``/mcp`` requests to their session's transport."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        manager = get_session_manager(request)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)

        created = False
        if session_id is None and request.method == "POST":
            session = await manager.start_streamable_http()
            created = True
        else:
            try:
                session = manager.require(FAMILY, session_id)
            except SessionNotFound as exc:
                await protocol_error(exc)(scope, receive, send)
                return

        status_code = 500

        async def send_and_record(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        session.open_requests += 1
        try:
            await session.transport.handle_request(scope, receive, send_and_record)
        finally:
            session.open_requests -= 1
            session.touch()

        if request.method == "DELETE":
            manager.remove(FAMILY, session.session_id)
        elif created and status_code >= 400:
            logger.info("Discarding session %s: first request rejected (%d)", session.session_id, status_code)
            manager.remove(FAMILY, session.session_id)


router = APIRouter()
router.add_route("/mcp", StreamableHTTPEndpoint(), methods=["GET", "POST", "DELETE"])
