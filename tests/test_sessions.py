"""Tests for the session manager."""

from __future__ import annotations

import time

import anyio
import pytest

from src.engine import create_registry, create_server
from src.errors import SESSION_ERROR, SessionNotFound
from src.sessions import SessionFamily, SessionManager, SessionState

HTTP = SessionFamily.STREAMABLE_HTTP
SSE = SessionFamily.SSE


@pytest.fixture
def manager() -> SessionManager:
    registry = create_registry()
    return SessionManager(lambda: create_server(registry), idle_timeout=60)


class TestCreateAndLookup:
    def test_ids_are_distinct(self, manager):
        ids = {manager.create(HTTP).session_id for _ in range(50)}
        assert len(ids) == 50
        assert manager.count(HTTP) == 50

    def test_each_session_has_its_own_server(self, manager):
        first = manager.create(HTTP)
        second = manager.create(HTTP)
        assert first.server is not second.server

    def test_new_session_is_active(self, manager):
        assert manager.create(SSE).state is SessionState.ACTIVE

    def test_families_are_isolated(self, manager):
        session = manager.create(HTTP)
        assert manager.get(HTTP, session.session_id) is session
        assert manager.get(SSE, session.session_id) is None

    def test_get_unknown_or_missing_id(self, manager):
        assert manager.get(HTTP, "does-not-exist") is None
        assert manager.get(HTTP, None) is None
        assert manager.get(HTTP, "") is None

    def test_transport_allocated_id_is_kept(self, manager):
        server = manager.new_server()
        session = manager.create(SSE, "0123456789abcdef0123456789abcdef", server=server)
        assert session.session_id == "0123456789abcdef0123456789abcdef"
        assert session.server is server
        with pytest.raises(ValueError):
            manager.create(SSE, "0123456789abcdef0123456789abcdef")


class TestRequire:
    def test_missing_id(self, manager):
        with pytest.raises(SessionNotFound) as exc_info:
            manager.require(HTTP, None)
        assert exc_info.value.error.code == SESSION_ERROR
        assert "No valid session ID" in exc_info.value.message

    def test_unknown_id(self, manager):
        with pytest.raises(SessionNotFound) as exc_info:
            manager.require(HTTP, "made-up-by-client")
        assert exc_info.value.message == "Session not found"
        # A client-supplied id is never adopted
        assert manager.count() == 0

    def test_require_refreshes_activity(self, manager):
        session = manager.create(HTTP)
        session.last_active -= 120
        manager.require(HTTP, session.session_id)
        assert time.monotonic() - session.last_active < 60


class TestRemove:
    def test_remove_is_idempotent(self, manager):
        session = manager.create(HTTP)
        assert manager.remove(HTTP, session.session_id) is True
        assert manager.remove(HTTP, session.session_id) is False
        assert session.state is SessionState.CLOSED
        assert manager.get(HTTP, session.session_id) is None

    def test_remove_only_touches_one_session(self, manager):
        keep = manager.create(HTTP)
        drop = manager.create(HTTP)
        manager.remove(HTTP, drop.session_id)
        assert manager.get(HTTP, keep.session_id) is keep
        assert keep.is_active

    def test_close_all(self, manager):
        sessions = [manager.create(HTTP), manager.create(SSE)]
        assert manager.close_all() == 2
        assert manager.count() == 0
        assert all(s.state is SessionState.CLOSED for s in sessions)

    @pytest.mark.anyio
    async def test_close_cancels_the_serving_task(self, manager):
        session = manager.create(SSE)
        session.cancel_scope = anyio.CancelScope()
        manager.remove(SSE, session.session_id)
        assert session.cancel_scope.cancel_called


class TestIdleSweep:
    def test_idle_streamable_session_is_removed(self, manager):
        idle = manager.create(HTTP)
        fresh = manager.create(HTTP)
        idle.last_active -= 120

        assert manager.sweep_idle() == 1
        assert manager.get(HTTP, idle.session_id) is None
        assert idle.state is SessionState.CLOSED
        assert manager.get(HTTP, fresh.session_id) is fresh

    def test_session_with_open_request_is_kept(self, manager):
        streaming = manager.create(HTTP)
        streaming.last_active -= 120
        streaming.open_requests = 1

        assert manager.sweep_idle() == 0
        assert manager.get(HTTP, streaming.session_id) is streaming

    def test_sse_sessions_are_not_swept(self, manager):
        session = manager.create(SSE)
        assert manager.sweep_idle(now=time.monotonic() + 3600) == 0
        assert manager.get(SSE, session.session_id) is session


@pytest.mark.anyio
class TestStreamableHttpTasks:
    async def test_start_requires_run(self, manager):
        with pytest.raises(RuntimeError):
            await manager.start_streamable_http()

    async def test_session_task_runs_until_removed(self, manager):
        async with manager.run():
            session = await manager.start_streamable_http()
            assert session.transport.mcp_session_id == session.session_id
            assert manager.get(HTTP, session.session_id) is session

            manager.remove(HTTP, session.session_id)
            await anyio.sleep(0)
        assert session.state is SessionState.CLOSED
        assert manager.count() == 0

    async def test_run_exit_closes_everything(self, manager):
        async with manager.run():
            sessions = [await manager.start_streamable_http() for _ in range(3)]
            assert manager.count(HTTP) == 3
        assert manager.count() == 0
        assert all(s.state is SessionState.CLOSED for s in sessions)
