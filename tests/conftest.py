"""Shared test fixtures for the Ecuro MCP test suite."""

from __future__ import annotations

import os
from collections.abc import Callable

import httpx
import pytest

BASE_URL = "https://ecuro.test/api/v1/ecuro-light"


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load.
    """
    os.environ.setdefault("ECURO_ACCESS_TOKEN", "test-ecuro-token-123")
    os.environ.setdefault("METRICS_ENABLED", "false")


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeUpstream:
    """``httpx.MockTransport`` handler that records every request it serves."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"ok": True})
        )

    def reply(self, status_code: int = 200, **kwargs) -> None:
        """Answer every following request with the given response."""
        self._responder = lambda request: httpx.Response(status_code, **kwargs)

    def fail_with(self, exc_type: type[httpx.TransportError], message: str) -> None:
        """Fail every following request before any response is produced."""

        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc_type(message, request=request)

        self._responder = _raise

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def upstream(monkeypatch):
    """Fake Ecuro API installed as the shared client used by every tool."""
    from src.services import ecuro_client

    fake = FakeUpstream()
    client = ecuro_client.EcuroClient(
        token="test-token",
        base_url=BASE_URL,
        transport=httpx.MockTransport(fake),
    )
    monkeypatch.setattr(ecuro_client, "_client", client)
    fake.client = client
    return fake
