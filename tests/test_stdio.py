"""Tests for the stdio transport."""

from __future__ import annotations

import io
import json

import anyio
import pytest

from src.config import SERVER_NAME
from src.engine import create_registry, create_server
from src.transport.stdio import run_stdio

pytestmark = pytest.mark.anyio

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "pytest", "version": "0"},
    },
}


async def _run(lines: list[str]) -> list[dict]:
    stdin = anyio.wrap_file(io.StringIO("".join(line + "\n" for line in lines)))
    buffer = io.StringIO()
    await run_stdio(create_server(create_registry()), stdin=stdin, stdout=anyio.wrap_file(buffer))
    return [json.loads(line) for line in buffer.getvalue().splitlines()]


class TestStdio:
    async def test_initialize_gets_one_line_response(self):
        responses = await _run([json.dumps(INITIALIZE)])

        assert len(responses) == 1
        result = responses[0]["result"]
        assert responses[0]["id"] == 1
        assert result["serverInfo"]["name"] == SERVER_NAME
        assert "tools" in result["capabilities"]

    async def test_returns_when_stdin_closes(self):
        with anyio.fail_after(5):
            assert await _run([]) == []
