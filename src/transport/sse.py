"""SSE (publish/subscribe) transport for older MCP clients.

Built on the SDK's ``SseServerTransport``.  ``GET /sse`` opens an event
stream whose first event, ``endpoint``, tells the client where to post:
``/messages?session_id=<id>``.  Every accepted ``POST /messages`` is
answered with ``202 Accepted``; the JSON-RPC response is then delivered as
a ``message`` event on the stream.

The id is allocated by the transport during the handshake.  The session is
registered with the session manager as the ``endpoint`` event goes out,
before the client can post, and removed as soon as the stream ends, so a
post for a closed stream is rejected here instead of reaching a dead
transport.  ``sessionId`` is accepted as an alias of ``session_id``.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlencode

import anyio
from fastapi import APIRouter, Request
from mcp.server.sse import SseServerTransport
from starlette.types import Message, Receive, Scope, Send

from src.api.routes import get_session_manager, protocol_error
from src.errors import InvalidSession, SessionNotFound
from src.sessions import Session, SessionFamily

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/messages"
SESSION_ID_PARAMS = ("session_id", "sessionId")

FAMILY = SessionFamily.SSE

_ENDPOINT_SESSION_ID = re.compile(rb"session_id=([0-9a-f]{32})")

transport = SseServerTransport(MESSAGES_PATH)


class SseEndpoint:
    """``GET /sse``: one event stream, one MCP server, one session."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        manager = get_session_manager(Request(scope))
        server = manager.new_server()
        session: Session | None = None
        cancel_scope = anyio.CancelScope()

        async def send_and_register(message: Message) -> None:
            nonlocal session
            if session is None and message["type"] == "http.response.body":
                match = _ENDPOINT_SESSION_ID.search(message.get("body", b""))
                if match:
                    session = manager.create(FAMILY, match.group(1).decode(), server=server)
                    session.cancel_scope = cancel_scope
            await send(message)

        try:
            with cancel_scope:
                async with transport.connect_sse(scope, receive, send_and_register) as streams:
                    await server.run(streams[0], streams[1], server.create_initialization_options())
        finally:
            if session is not None:
                manager.remove(FAMILY, session.session_id)
            logger.debug("SSE stream closed")


class MessagesEndpoint:
    """``POST /messages``: route a client message to its SSE session."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        manager = get_session_manager(request)
        session_id = next(
            (request.query_params[p] for p in SESSION_ID_PARAMS if request.query_params.get(p)),
            None,
        )
        if session_id is None:
            await protocol_error(InvalidSession(), status_code=400)(scope, receive, send)
            return
        try:
            manager.require(FAMILY, session_id)
        except SessionNotFound as exc:
            await protocol_error(exc, status_code=404)(scope, receive, send)
            return

        if request.query_params.get("session_id") != session_id:
            scope = {**scope, "query_string": urlencode({"session_id": session_id}).encode()}
        await transport.handle_post_message(scope, receive, send)


router = APIRouter()
router.add_route("/sse", SseEndpoint(), methods=["GET"])
router.add_route(MESSAGES_PATH, MessagesEndpoint(), methods=["POST"])
