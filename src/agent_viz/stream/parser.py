"""Stateful parser turning raw agent events into display-ready chunks."""

from __future__ import annotations

import logging
import re
from typing import Any

from agent_viz.config import ParserConfig
from agent_viz.stream.chunks import (
    ErrorChunk,
    ParsedChunk,
    SystemChunk,
    TextChunk,
    ThinkingChunk,
    TodoChunk,
    TodoItem,
    ToolResultChunk,
    ToolUseChunk,
)
from agent_viz.stream.events import (
    AssistantTextEvent,
    AssistantToolResultEvent,
    AssistantToolUseEvent,
    ErrorEvent,
    RawEventChunk,
    ResultEvent,
    SystemEvent,
    ThinkingEvent,
    parse_raw_event,
)
from agent_viz.stream.planning import PlanningTextFilter

logger = logging.getLogger(__name__)

_TODO_STATUSES = ("pending", "in_progress", "completed")


class StreamChunkParser:
    """Parses one response turn of agent events, strictly in arrival order.

    The instance owns two pieces of order-dependent state: the planning
    narration filter and the map of tool invocations seen so far. Both live
    until `reset` is called at the next conversation boundary.
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or ParserConfig()
        self._planning = PlanningTextFilter(self.config)
        self._tool_prefix = re.compile(self.config.tool_prefix_pattern)
        self._accumulated_text = ""
        self._displayed_text = ""
        self._active_tool_calls: dict[str, ToolUseChunk] = {}

    @property
    def accumulated_text(self) -> str:
        """Full assistant text including filtered narration (diagnostics only)."""
        return self._accumulated_text

    @property
    def displayed_text(self) -> str:
        """Narration-free text shown to the user."""
        return self._displayed_text

    def active_tool_calls(self) -> list[ToolUseChunk]:
        return list(self._active_tool_calls.values())

    def parse_chunk(self, raw: RawEventChunk | dict[str, Any] | Any) -> ParsedChunk | None:
        """Parse one raw event. Unrecognized shapes return None."""

        event = parse_raw_event(raw)
        if event is None:
            return None

        if isinstance(event, AssistantTextEvent):
            return self._parse_text(event)
        if isinstance(event, AssistantToolUseEvent):
            return self._parse_tool_use(event)
        if isinstance(event, AssistantToolResultEvent):
            return self._parse_tool_result(event)
        if isinstance(event, SystemEvent):
            return SystemChunk(
                subtype=event.subtype,
                message=event.message,
                session_id=event.session_id,
            )
        if isinstance(event, ResultEvent):
            self.flush()
            return SystemChunk(subtype="complete", message="Response complete")
        if isinstance(event, ThinkingEvent):
            return ThinkingChunk(content=event.text)
        if isinstance(event, ErrorEvent):
            return ErrorChunk(message=event.message)
        return None

    def flush(self) -> str:
        """Release text held back by the planning filter into the display text.

        Called automatically on the terminal `result` event; transports that
        never send one should call it once the stream ends.
        """
        released = self._planning.flush()
        self._displayed_text += released
        return released

    def reset(self) -> None:
        """Clear all per-turn state. Must be called at conversation boundaries."""
        self._accumulated_text = ""
        self._displayed_text = ""
        self._active_tool_calls.clear()
        self._planning.reset()

    def _parse_text(self, event: AssistantTextEvent) -> TextChunk:
        self._accumulated_text += event.text
        filtered = self._planning.feed(event.text)
        if filtered:
            self._displayed_text += filtered
        return TextChunk(
            content=filtered,
            accumulated_text=self._accumulated_text,
            displayed_text=self._displayed_text,
        )

    def _parse_tool_use(self, event: AssistantToolUseEvent) -> ParsedChunk:
        if event.name == self.config.todo_tool_name:
            return _todo_chunk(event.input)

        parsed = ToolUseChunk(
            id=event.id,
            name=event.name,
            display_name=self._tool_prefix.sub("", event.name),
            input=dict(event.input),
        )
        self._active_tool_calls[event.id] = parsed
        return parsed

    def _parse_tool_result(self, event: AssistantToolResultEvent) -> ToolResultChunk:
        tool_call = self._active_tool_calls.get(event.tool_use_id)
        if tool_call is None:
            logger.debug("Tool result %s has no matching tool use", event.tool_use_id)
        return ToolResultChunk(
            tool_use_id=event.tool_use_id,
            name=tool_call.name if tool_call is not None else self.config.unknown_tool_name,
            result=event.content,
            is_error=event.is_error,
        )


def _todo_chunk(payload: dict[str, Any]) -> TodoChunk:
    raw_items = payload.get("todos") or []
    items: list[TodoItem] = []
    for raw in raw_items if isinstance(raw_items, list) else []:
        if not isinstance(raw, dict):
            continue
        content = str(raw.get("content") or "")
        status = raw.get("status") if raw.get("status") in _TODO_STATUSES else "pending"
        items.append(
            TodoItem(
                content=content,
                status=status,
                active_form=str(raw.get("activeForm") or content),
            )
        )
    return TodoChunk(items=tuple(items))
