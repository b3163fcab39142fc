"""Pydantic schemas for the HTTP status documents.

The MCP messages themselves are modelled by ``mcp.types``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.config import SERVER_NAME, SERVER_VERSION


class HealthResponse(BaseModel):
    """Health check / root document."""

    status: str = "ok"
    server: str = SERVER_NAME
    version: str = SERVER_VERSION
    tools: int = Field(..., description="Number of registered tools")
    transports: list[str] = Field(default_factory=lambda: ["streamable-http", "sse"])
