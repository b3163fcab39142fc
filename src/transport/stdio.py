"""Stdio transport: one process, one session, newline-delimited JSON-RPC.

The framing is the SDK's ``stdio_server``; this module only binds it to an
MCP server.  Logging goes to stderr, stdout carries protocol messages only.
"""

from __future__ import annotations

import logging

import anyio
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

logger = logging.getLogger(__name__)


async def run_stdio(
    server: Server,
    stdin: anyio.AsyncFile[str] | None = None,
    stdout: anyio.AsyncFile[str] | None = None,
) -> None:
    """Serve *server* until stdin reaches EOF.

    *stdin* / *stdout* default to the process streams.
    """
    logger.info("Ecuro MCP server running on stdio")
    async with stdio_server(stdin, stdout) as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("stdin closed, stdio transport stopped")
