"""Session bookkeeping for the HTTP transports.

Two independent session families share this module: Streamable HTTP
sessions (addressed by the ``mcp-session-id`` header) and SSE sessions
(addressed by the query parameter of ``POST /messages``).  Each family has
its own table; a session id is only meaningful within its family.

Lifecycle of a session::

    UNINITIALIZED ──create──▶ ACTIVE ──close──▶ CLOSED

``SessionManager`` is the only owner of the tables.  Transports go through
``create`` / ``get`` / ``remove`` and never touch the dicts directly.  Table
operations never suspend, so they are atomic with respect to the event
loop; the lock additionally covers callers on other threads (the test
client, the metrics thread).

Every Streamable HTTP session runs its MCP server in a task owned by the
manager (``async with manager.run():`` in the application lifespan), the
same way ``mcp.server.streamable_http_manager`` does.  Those sessions have
no connection whose end would close them, so sessions left idle for longer
than ``SESSION_IDLE_TIMEOUT_SECONDS`` are swept.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport

from src.config import SESSION_IDLE_TIMEOUT_SECONDS
from src.errors import SessionNotFound

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 60.0


class SessionFamily(str, enum.Enum):
    STREAMABLE_HTTP = "streamable-http"
    SSE = "sse"


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass(eq=False)
class Session:
    """One client conversation: an id, its MCP server and, for Streamable HTTP, its transport."""

    session_id: str
    family: SessionFamily
    server: Server
    transport: StreamableHTTPServerTransport | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_active: float = field(default_factory=time.monotonic)
    open_requests: int = 0
    state: SessionState = SessionState.UNINITIALIZED
    cancel_scope: anyio.CancelScope | None = field(default=None, repr=False)

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def touch(self) -> None:
        self.last_active = time.monotonic()

    def is_idle(self, timeout: float, now: float | None = None) -> bool:
        """Idle means no request in flight and none seen for *timeout* seconds."""
        now = time.monotonic() if now is None else now
        return self.open_requests == 0 and now - self.last_active > timeout

    def close(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        # Ends the task serving this session; in-flight writes are dropped.
        if self.cancel_scope is not None:
            self.cancel_scope.cancel()


class SessionManager:
    """Creates, finds and closes sessions for both transport families."""

    def __init__(
        self,
        server_factory: Callable[[], Server],
        *,
        idle_timeout: float = SESSION_IDLE_TIMEOUT_SECONDS,
    ):
        self._server_factory = server_factory
        self.idle_timeout = idle_timeout
        self._tables: dict[SessionFamily, dict[str, Session]] = {
            family: {} for family in SessionFamily
        }
        self._lock = threading.Lock()
        self._task_group: TaskGroup | None = None

    def new_server(self) -> Server:
        return self._server_factory()

    # ── Table operations ─────────────────────────────────────────────

    def create(
        self,
        family: SessionFamily,
        session_id: str | None = None,
        *,
        server: Server | None = None,
    ) -> Session:
        """Register a new session.

        The id is generated here unless the transport already allocated
        one (the SSE handshake does).
        """
        server = server if server is not None else self._server_factory()
        with self._lock:
            table = self._tables[family]
            if session_id is None:
                session_id = str(uuid4())
                while session_id in table:
                    session_id = str(uuid4())
            elif session_id in table:
                raise ValueError(f"{family.value} session {session_id} already exists")
            session = Session(session_id=session_id, family=family, server=server)
            session.state = SessionState.ACTIVE
            table[session_id] = session
        logger.info("Created %s session %s", family.value, session_id)
        return session

    def get(self, family: SessionFamily, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        with self._lock:
            return self._tables[family].get(session_id)

    def require(self, family: SessionFamily, session_id: str | None) -> Session:
        """Like ``get`` but raises ``SessionNotFound`` for a missing or unknown id."""
        session = self.get(family, session_id)
        if session is None:
            if session_id:
                logger.info("Rejected unknown %s session id %s", family.value, session_id)
                raise SessionNotFound("Session not found")
            raise SessionNotFound()
        session.touch()
        return session

    def remove(self, family: SessionFamily, session_id: str | None) -> bool:
        """Remove and close a session.  Idempotent: unknown ids are a no-op.

        Returns ``True`` only for the call that actually removed the entry.
        """
        if not session_id:
            return False
        with self._lock:
            session = self._tables[family].pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("Closed %s session %s", family.value, session_id)
        return True

    def count(self, family: SessionFamily | None = None) -> int:
        with self._lock:
            if family is not None:
                return len(self._tables[family])
            return sum(len(table) for table in self._tables.values())

    def close_all(self) -> int:
        """Close every session of every family (shutdown)."""
        with self._lock:
            sessions = [s for table in self._tables.values() for s in table.values()]
            for table in self._tables.values():
                table.clear()
        for session in sessions:
            session.close()
        if sessions:
            logger.info("Closed %d sessions on shutdown", len(sessions))
        return len(sessions)

    def sweep_idle(self, now: float | None = None) -> int:
        """Remove Streamable HTTP sessions idle for longer than ``idle_timeout``.

        SSE sessions are not swept: they end with their event stream.
        """
        family = SessionFamily.STREAMABLE_HTTP
        with self._lock:
            stale = [
                s.session_id
                for s in self._tables[family].values()
                if s.is_idle(self.idle_timeout, now)
            ]
        removed = 0
        for session_id in stale:
            if self.remove(family, session_id):
                logger.info("Expired idle %s session %s", family.value, session_id)
                removed += 1
        return removed

    # ── Streamable HTTP session tasks ────────────────────────────────

    @asynccontextmanager
    async def run(self) -> AsyncIterator[SessionManager]:
        """Own the tasks serving Streamable HTTP sessions until exit."""
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            tg.start_soon(self._sweep_forever)
            try:
                yield self
            finally:
                self._task_group = None
                self.close_all()
                tg.cancel_scope.cancel()

    async def start_streamable_http(self) -> Session:
        """Create a session with its own transport and start serving it."""
        if self._task_group is None:
            raise RuntimeError("SessionManager.run() must be active to start sessions")
        session = self.create(SessionFamily.STREAMABLE_HTTP)
        session.transport = StreamableHTTPServerTransport(
            mcp_session_id=session.session_id,
            is_json_response_enabled=True,
        )
        await self._task_group.start(self._serve_streamable_http, session)
        return session

    async def _serve_streamable_http(
        self,
        session: Session,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        server = session.server
        try:
            with anyio.CancelScope() as scope:
                session.cancel_scope = scope
                async with session.transport.connect() as (read_stream, write_stream):
                    task_status.started()
                    await server.run(
                        read_stream,
                        write_stream,
                        server.create_initialization_options(),
                    )
        except Exception:
            logger.exception("Streamable HTTP session %s crashed", session.session_id)
        finally:
            self.remove(session.family, session.session_id)

    async def _sweep_forever(self) -> None:
        while True:
            await anyio.sleep(SWEEP_INTERVAL_SECONDS)
            self.sweep_idle()
