"""Status routes and the shared request helpers used by the transport routers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from src.api.schemas import HealthResponse
from src.errors import McpProtocolError, error_document
from src.sessions import SessionManager
from src.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_session_manager(request: Request) -> SessionManager:
    """Retrieve the session manager created by the lifespan (see ``server.py``)."""
    manager = getattr(request.app.state, "session_manager", None)
    if manager is None:
        raise HTTPException(
            status_code=503,
            detail="The server is still starting up. Please try again in a moment.",
        )
    return manager


def get_registry(request: Request) -> ToolRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=503,
            detail="The server is still starting up. Please try again in a moment.",
        )
    return registry


def protocol_error(
    error: McpProtocolError,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """A JSON-RPC error document not tied to any request id."""
    return JSONResponse(error_document(error), status_code=status_code, headers=headers)


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/", response_model=HealthResponse)
@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Static status document with the number of registered tools."""
    return HealthResponse(tools=len(get_registry(request)))
