"""Tests for the MCP server built around the tool registry.

The server runs behind the SDK's in-memory transport and is driven by a
real ``ClientSession``, so every call goes through initialize and the full
JSON-RPC round trip.
"""

from __future__ import annotations

import pytest
from mcp import types
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
from pydantic import ValidationError

from src.config import SERVER_NAME, SERVER_VERSION
from src.engine import create_registry, create_server
from src.errors import INVALID_PARAMS, METHOD_NOT_FOUND, DuplicateToolError
from src.tools.appointments import appointment_tools

pytestmark = pytest.mark.anyio

CLINIC_ID = "3f2b8c1e-5d4a-4b6f-9e7d-1a2b3c4d5e6f"


@pytest.fixture(scope="module")
def shared_registry():
    return create_registry()


@pytest.fixture
def server(shared_registry):
    return create_server(shared_registry)


# ── Tests: construction ──────────────────────────────────────────────


class TestConstruction:
    def test_initialization_options(self, server):
        options = server.create_initialization_options()
        assert options.server_name == SERVER_NAME
        assert options.server_version == SERVER_VERSION
        assert options.instructions
        assert options.capabilities.tools is not None

    def test_duplicate_tool_group_is_fatal(self):
        with pytest.raises(DuplicateToolError):
            create_registry([appointment_tools, appointment_tools])

    def test_sessions_share_the_registry(self, shared_registry):
        first = create_server(shared_registry)
        second = create_server(shared_registry)
        assert first is not second
        assert types.CallToolRequest in first.request_handlers


# ── Tests: protocol round trip ───────────────────────────────────────


class TestLifecycle:
    async def test_ping_after_initialize(self, server):
        async with create_connected_server_and_client_session(server) as client:
            result = await client.send_ping()
        assert isinstance(result, types.EmptyResult)

    async def test_unknown_method(self, server):
        async with create_connected_server_and_client_session(server) as client:
            with pytest.raises(McpError) as exc_info:
                await client.send_request(
                    types.ClientRequest(types.ListResourcesRequest(method="resources/list")),
                    types.ListResourcesResult,
                )
        assert exc_info.value.error.code == METHOD_NOT_FOUND


class TestTools:
    async def test_tools_list(self, server):
        async with create_connected_server_and_client_session(server) as client:
            result = await client.list_tools()
        names = {tool.name for tool in result.tools}
        assert len(names) == 30
        assert "ecuro_create_appointment" in names
        assert "ecuro_get_dentist_for_assessment" in names

    async def test_unknown_tool_is_invalid_params(self, server, upstream):
        async with create_connected_server_and_client_session(server) as client:
            with pytest.raises(McpError) as exc_info:
                await client.call_tool("nope", {})
        assert exc_info.value.error.code == INVALID_PARAMS
        assert exc_info.value.error.message == "Tool nope not found"
        assert upstream.requests == []

    async def test_invalid_arguments_carry_field_errors(self, server, upstream):
        async with create_connected_server_and_client_session(server) as client:
            with pytest.raises(McpError) as exc_info:
                await client.call_tool("ecuro_list_returns", {"clinicId": "x"})
        error = exc_info.value.error
        assert error.code == INVALID_PARAMS
        assert tuple(error.data[0]["loc"]) == ("clinicId",)
        assert upstream.requests == []

    async def test_upstream_failure_is_a_result(self, server, upstream):
        upstream.reply(500, json={"message": "database offline"})

        async with create_connected_server_and_client_session(server) as client:
            result = await client.call_tool("ecuro_list_returns", {"clinicId": CLINIC_ID})

        assert result.isError is True
        assert result.content[0].text == "Ecuro API Error (500): database offline"

    async def test_successful_call(self, server, upstream):
        upstream.reply(200, json=[{"name": "Ortodontia"}])

        async with create_connected_server_and_client_session(server) as client:
            result = await client.call_tool("ecuro_list_specialties", {})

        assert result.isError is False
        assert "Ortodontia" in result.content[0].text


# ── Tests: message models ────────────────────────────────────────────


class TestRequestIds:
    @pytest.mark.parametrize("request_id", [1, "abc"])
    def test_integer_and_string_ids(self, request_id):
        request = types.JSONRPCRequest.model_validate(
            {"jsonrpc": "2.0", "id": request_id, "method": "ping"}
        )
        assert request.id == request_id

    @pytest.mark.parametrize("request_id", [True, 1.5, None])
    def test_other_id_types_are_rejected(self, request_id):
        with pytest.raises(ValidationError):
            types.JSONRPCRequest.model_validate(
                {"jsonrpc": "2.0", "id": request_id, "method": "ping"}
            )
