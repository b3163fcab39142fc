"""Error taxonomy shared by the tool registry and the transport bindings.

Protocol-level errors (unknown tools, bad arguments, bad sessions) are
``McpError`` subclasses, so the MCP server sends them back as JSON-RPC
error objects as-is.  Upstream failures are *not* protocol errors: they are
turned into tool-result content so the calling agent can talk about them
(see ``src.tools.registry``).
"""

from __future__ import annotations

from typing import Any

from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ErrorData,
    JSONRPCError,
    RequestId,
)

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "SESSION_ERROR",
    "DuplicateToolError",
    "EcuroAPIError",
    "InternalFault",
    "InvalidArguments",
    "InvalidSession",
    "McpProtocolError",
    "SessionNotFound",
    "SupabaseError",
    "ToolNotFound",
    "error_document",
]

# Implementation-defined server error, used for session problems
SESSION_ERROR = -32000

# Id used for errors that answer no particular request, as the SDK transports do.
NO_REQUEST_ID = "server-error"


class McpProtocolError(McpError):
    """Base class for errors reported through the JSON-RPC ``error`` member."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str, data: Any = None):
        super().__init__(ErrorData(code=self.code, message=message, data=data))

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def data(self) -> Any:
        return self.error.data


class ToolNotFound(McpProtocolError):
    """Raised when ``tools/call`` names a tool the registry does not know."""

    code = INVALID_PARAMS

    def __init__(self, name: str):
        self.tool_name = name
        super().__init__(f"Tool {name} not found")


class InvalidArguments(McpProtocolError):
    """Raised when arguments fail the tool's input contract.

    ``data`` carries the field-level violations reported by pydantic.
    """

    code = INVALID_PARAMS

    def __init__(self, name: str, errors: list[dict[str, Any]]):
        self.tool_name = name
        super().__init__(f"Invalid arguments for tool {name}", data=errors)


class SessionNotFound(McpProtocolError):
    code = SESSION_ERROR

    def __init__(self, message: str = "Bad Request: No valid session ID provided"):
        super().__init__(message)


# Alias used by the transports when the id is missing rather than unknown.
InvalidSession = SessionNotFound


class InternalFault(McpProtocolError):
    """Unexpected failure.  The message is always generic."""

    code = INTERNAL_ERROR

    def __init__(self) -> None:
        super().__init__("Internal error")


class DuplicateToolError(RuntimeError):
    """Two tools were registered under the same name (startup-time bug)."""


class EcuroAPIError(Exception):
    """Raised when a call to the Ecuro Light API fails.

    ``status_code`` is ``None`` when the request never got an HTTP answer
    (timeout, connection refused, ...).
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SupabaseError(EcuroAPIError):
    """A dentist-directory query against Supabase failed."""


def error_document(error: McpError, request_id: RequestId = NO_REQUEST_ID) -> dict[str, Any]:
    """Render *error* as a complete JSON-RPC error response."""
    return JSONRPCError(jsonrpc="2.0", id=request_id, error=error.error).model_dump(
        mode="json", by_alias=True, exclude_none=True,
    )
