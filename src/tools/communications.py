"""Communication tools."""

from __future__ import annotations

from src.services.ecuro_client import get_ecuro_client
from src.tools.registry import WRITE, ToolDescriptor, ToolOutcome, json_content
from src.tools.schemas import MarkCommunicationRead


async def mark_communication_read(args: MarkCommunicationRead) -> ToolOutcome:
    result = await get_ecuro_client().put(f"/communications/{args.communicationId}/read")
    return json_content(result)


def communication_tools() -> list[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="ecuro_mark_communication_read",
            title="Mark Communication as Read",
            description=(
                "Mark a patient communication as read, signalling that the patient "
                "has seen a message or notification."
            ),
            input_model=MarkCommunicationRead,
            handler=mark_communication_read,
            annotations={**WRITE, "idempotentHint": True},
        ),
    ]
