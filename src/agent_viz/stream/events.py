"""Raw agent event chunks validated at the transport boundary."""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class _RawEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class SystemEvent(_RawEvent):
    type: Literal["system"] = "system"
    subtype: str = "status"
    session_id: str | None = Field(default=None, alias="sessionId")
    message: str | None = None


class AssistantTextEvent(_RawEvent):
    type: Literal["assistant_text"] = "assistant_text"
    text: str


class AssistantToolUseEvent(_RawEvent):
    type: Literal["assistant_tool_use"] = "assistant_tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class AssistantToolResultEvent(_RawEvent):
    type: Literal["assistant_tool_result"] = "assistant_tool_result"
    tool_use_id: str = Field(alias="toolUseId")
    content: Any = None
    is_error: bool = Field(default=False, alias="isError")


class ThinkingEvent(_RawEvent):
    type: Literal["thinking"] = "thinking"
    text: str = ""


class ErrorEvent(_RawEvent):
    type: Literal["error"] = "error"
    message: str = "Unknown error"


class ResultEvent(_RawEvent):
    """Terminal event emitted once the agent has finished its response."""

    type: Literal["result"] = "result"


RawEventChunk = Annotated[
    Union[
        SystemEvent,
        AssistantTextEvent,
        AssistantToolUseEvent,
        AssistantToolResultEvent,
        ThinkingEvent,
        ErrorEvent,
        ResultEvent,
    ],
    Field(discriminator="type"),
]

_RAW_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(RawEventChunk)


def parse_raw_event(payload: Any) -> RawEventChunk | None:
    """Validate one JSON-shaped event; unrecognized shapes yield None."""

    if isinstance(payload, _RawEvent):
        return payload  # type: ignore[return-value]
    if not isinstance(payload, dict):
        return None
    try:
        return _RAW_EVENT_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        logger.debug("Ignoring unrecognized event chunk: %s", exc.errors()[:1])
        return None


def split_sdk_message(payload: dict[str, Any]) -> list[RawEventChunk]:
    """Normalize an agent-SDK message into one raw chunk per content block.

    The SDK delivers assistant turns as ``{"type": "assistant", "message":
    {"content": [...]}}`` where each block is ``text``, ``tool_use`` or
    ``tool_result``. Other top-level messages are validated as-is, with the
    SDK's ``thinking``/``error`` field names mapped onto ours.
    """

    msg_type = payload.get("type")
    if msg_type != "assistant":
        if msg_type == "thinking" and "text" not in payload:
            payload = {"type": "thinking", "text": payload.get("thinking") or payload.get("content") or ""}
        elif msg_type == "error" and "message" not in payload:
            payload = {"type": "error", "message": payload.get("error") or "Unknown error"}
        elif msg_type == "tool_result":
            payload = {
                "type": "assistant_tool_result",
                "tool_use_id": payload.get("tool_use_id") or payload.get("toolUseId") or payload.get("id"),
                "content": payload.get("result", payload.get("content")),
                "is_error": bool(payload.get("is_error") or payload.get("isError")),
            }
        event = parse_raw_event(payload)
        return [event] if event is not None else []

    message = payload.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, list):
        return []

    events: list[RawEventChunk] = []
    for block in content:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type == "text":
            candidate: dict[str, Any] = {"type": "assistant_text", "text": block.get("text", "")}
        elif block_type == "tool_use":
            candidate = {
                "type": "assistant_tool_use",
                "id": block.get("id"),
                "name": block.get("name"),
                "input": block.get("input") or {},
            }
        elif block_type == "tool_result":
            candidate = {
                "type": "assistant_tool_result",
                "tool_use_id": block.get("tool_use_id"),
                "content": block.get("content"),
                "is_error": bool(block.get("is_error", False)),
            }
        else:
            continue
        event = parse_raw_event(candidate)
        if event is not None:
            events.append(event)
    return events
