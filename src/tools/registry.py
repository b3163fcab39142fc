"""Tool descriptors, tool outcomes and the registry that dispatches to them.

A tool is a static mapping from a name to an input contract (a pydantic
model), a description and an async handler.  Handlers receive the validated
model and return a ``ToolOutcome``:

* ``Content`` — the text shown to the caller (pretty-printed JSON, a CSV
  export, a ``data:`` URI, ...).
* ``Failure`` — the upstream call failed; still delivered as tool-result
  content, flagged with ``isError``, so the calling agent can reason about it.

Malformed *calls* (unknown tool, bad arguments) never reach a handler and
are raised as protocol errors instead.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Union

from mcp import types
from pydantic import BaseModel, ValidationError

from src.errors import (
    DuplicateToolError,
    EcuroAPIError,
    InternalFault,
    InvalidArguments,
    ToolNotFound,
)

logger = logging.getLogger(__name__)


# ── Outcomes ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Content:
    text: str


@dataclass(frozen=True)
class Failure:
    kind: str
    message: str
    status_code: int | None = None


ToolOutcome = Union[Content, Failure]


def json_content(result: Any) -> Content:
    """Pretty-print an upstream payload the way the tools return it."""
    return Content(json.dumps(result, indent=2, ensure_ascii=False, default=str))


def render_outcome(outcome: ToolOutcome) -> types.CallToolResult:
    """Render an outcome as an MCP ``CallToolResult``."""
    if isinstance(outcome, Failure):
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=outcome.message)],
            isError=True,
        )
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=outcome.text)],
        isError=False,
    )


# ── Descriptors ──────────────────────────────────────────────────────

Handler = Callable[[Any], Awaitable[ToolOutcome]]


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    title: str
    description: str
    input_model: type[BaseModel]
    handler: Handler
    annotations: dict[str, bool] = field(default_factory=dict)

    def to_tool(self) -> types.Tool:
        """The entry returned by ``tools/list``."""
        annotations = None
        if self.annotations:
            annotations = types.ToolAnnotations(title=self.title, **self.annotations)
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(),
            annotations=annotations,
        )


READ_ONLY = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": True,
}
WRITE = {
    "readOnlyHint": False,
    "destructiveHint": False,
    "idempotentHint": False,
    "openWorldHint": True,
}


# ── Registry ─────────────────────────────────────────────────────────


class ToolRegistry:
    """Name → descriptor map.  Populated once at startup, read-only afterwards."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    def register(self, descriptor: ToolDescriptor) -> None:
        if descriptor.name in self:
            raise DuplicateToolError(f"Tool {descriptor.name!r} is already registered")
        self._tools[descriptor.name] = descriptor

    def register_all(self, descriptors: Iterable[ToolDescriptor]) -> None:
        for descriptor in descriptors:
            self.register(descriptor)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[types.Tool]:
        return [tool.to_tool() for tool in self._tools.values()]

    async def call(self, name: str, arguments: dict[str, Any] | None) -> ToolOutcome:
        """Validate *arguments* and run the tool.

        Raises ``ToolNotFound`` / ``InvalidArguments`` before any upstream
        call is made.  Upstream failures come back as ``Failure``; any other
        exception is logged and raised as ``InternalFault``.
        """
        tool = self.get(name)
        if tool is None:
            raise ToolNotFound(name)

        try:
            validated = tool.input_model.model_validate(arguments or {})
        except ValidationError as exc:
            raise InvalidArguments(
                name,
                exc.errors(include_url=False, include_context=False, include_input=False),
            ) from exc

        try:
            return await tool.handler(validated)
        except EcuroAPIError as exc:
            logger.warning("Tool %s: upstream failure: %s", name, exc)
            return Failure("upstream", str(exc), exc.status_code)
        except Exception as exc:
            logger.exception("Tool %s crashed", name)
            raise InternalFault() from exc
