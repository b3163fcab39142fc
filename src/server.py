"""FastAPI application serving the Ecuro MCP tools over HTTP.

Both HTTP transports are mounted on the same app:

* Streamable HTTP at ``/mcp``
* SSE at ``/sse`` + ``/messages``

Run with:
    uv run uvicorn src.server:app --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from src.api.middleware import StandardHeadersMiddleware
from src.api.routes import router
from src.config import SERVER_HOST, SERVER_NAME, SERVER_PORT, SERVER_VERSION
from src.engine import create_registry, create_server
from src.services.ecuro_client import close_ecuro_client, get_ecuro_client
from src.sessions import SessionManager
from src.transport import sse, streamable_http

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: initialise / tear-down shared resources ────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Build the tool registry once; every session server shares it."""
    registry = create_registry()
    application.state.registry = registry
    manager = SessionManager(lambda: create_server(registry))
    application.state.session_manager = manager
    client = get_ecuro_client()
    logger.info("Upstream Ecuro API at %s", client.base_url)
    logger.info("%s %s ready with %d tools", SERVER_NAME, SERVER_VERSION, len(registry))
    async with manager.run():
        yield
    await close_ecuro_client()
    logger.info("Shutdown complete")


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="Ecuro MCP Server",
    description="Model Context Protocol server for the Ecuro Light dental clinic API.",
    version=SERVER_VERSION,
    lifespan=lifespan,
)

app.add_middleware(StandardHeadersMiddleware)

# ── Register routes ──────────────────────────────────────────────────
app.include_router(router)
app.include_router(streamable_http.router)
app.include_router(sse.router)


# ── CLI entry point ──────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("Starting Ecuro MCP server on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run("src.server:app", host=SERVER_HOST, port=SERVER_PORT)
