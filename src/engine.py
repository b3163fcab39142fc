"""MCP protocol engine for the Ecuro tools.

Architecture:
  One ``ToolRegistry`` is built at startup from the tool groups and shared,
  read-only, by every engine.  Each session (the stdio process, every
  Streamable HTTP session, every SSE connection) runs its own MCP
  ``Server``; the SDK's ``ServerSession`` keeps the per-session protocol
  state (negotiated version, client info, initialization).

  Request flow:
    transport → Server.run → request_handlers[CallToolRequest]
              → ToolRegistry.call → tool handler → EcuroClient

  ``tools/call`` is registered straight into ``request_handlers`` instead of
  through ``@server.call_tool()``: the decorator turns every exception into
  ``isError`` content, which would hide unknown tools and bad arguments.
  Here ``ToolNotFound`` / ``InvalidArguments`` are ``McpError`` subclasses
  and come back as JSON-RPC errors, while upstream failures are rendered as
  ``isError`` content by the registry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from mcp import types
from mcp.server.lowlevel import Server

from src.config import SERVER_NAME, SERVER_VERSION
from src.prompts import SERVER_INSTRUCTIONS
from src.tools.appointments import appointment_tools
from src.tools.availability import availability_tools
from src.tools.clinics import clinic_tools
from src.tools.communications import communication_tools
from src.tools.dentists import dentist_tools
from src.tools.patients import patient_tools
from src.tools.registry import ToolDescriptor, ToolRegistry, render_outcome

logger = logging.getLogger(__name__)

# ── Tool groups ──────────────────────────────────────────────────────

TOOL_GROUPS: tuple[Callable[[], Iterable[ToolDescriptor]], ...] = (
    appointment_tools,
    availability_tools,
    patient_tools,
    clinic_tools,
    dentist_tools,
    communication_tools,
)


def create_registry(groups: Iterable[Callable[[], Iterable[ToolDescriptor]]] = TOOL_GROUPS) -> ToolRegistry:
    """Build the process-wide registry.  A duplicate tool name is fatal."""
    registry = ToolRegistry()
    for group in groups:
        registry.register_all(group())
    logger.info("Registered %d tools", len(registry))
    return registry


# ── Server ───────────────────────────────────────────────────────────


def create_server(registry: ToolRegistry, *, instructions: str = SERVER_INSTRUCTIONS) -> Server:
    """Build one MCP server exposing *registry*."""
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION, instructions=instructions)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return registry.list_tools()

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        outcome = await registry.call(request.params.name, request.params.arguments)
        return types.ServerResult(render_outcome(outcome))

    server.request_handlers[types.CallToolRequest] = call_tool
    return server
