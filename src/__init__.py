"""Ecuro MCP Server — the Ecuro Light dental clinic API as MCP tools.

Architecture Overview
=====================

The server exposes 30 tools (appointments, availability, patients, clinics,
dentists, communications) to MCP clients.  Every tool is a thin, validated
wrapper around one Ecuro Light REST endpoint, except the dentist lookups,
which query a Supabase view.

1. **Tool registry** — built once at startup from the tool groups.  Each
   tool pairs a name with a pydantic input model and an async handler.
   Calls with an unknown name or invalid arguments are rejected before the
   handler runs.

2. **Engine** — one MCP SDK ``Server`` per session answers ``initialize``,
   ``ping``, ``tools/list`` and ``tools/call``; ``tools/call`` goes through
   the registry and tool outcomes are rendered as MCP results.

3. **Transports** — stdio (one process, one session), Streamable HTTP
   (``/mcp`` with the ``mcp-session-id`` header) and SSE (``/sse`` plus
   ``/messages``).  The HTTP transports share a ``SessionManager``.

Key Design Decisions
--------------------
- **Upstream failures are content**: an Ecuro API error comes back as a tool
  result flagged ``isError`` so the calling agent can explain it.
- **No retries, no caching**: one tool call is exactly one upstream call.
- **Server-generated session ids** only; unknown ids are rejected.

Package Structure
-----------------
- ``src/config.py`` — Centralized configuration from environment variables
- ``src/errors.py`` — Protocol and upstream error types
- ``src/engine.py`` — MCP server and registry construction
- ``src/sessions.py`` — Session tables and tasks for the HTTP transports
- ``src/server.py`` — FastAPI application
- ``src/main.py`` — Process entry point (stdio or HTTP)
- ``src/services/`` — Ecuro API client, Supabase dentist directory, metrics
- ``src/tools/`` — Tool registry, input models and tool groups
- ``src/transport/`` — stdio, Streamable HTTP and SSE bindings
- ``src/api/`` — Status routes, middleware and status schemas
"""
