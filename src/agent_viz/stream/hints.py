"""Activity-indicator hints derived from parsed chunks."""

from __future__ import annotations

from agent_viz.stream.chunks import (
    ErrorChunk,
    ParsedChunk,
    SystemChunk,
    ThinkingChunk,
    TodoChunk,
    ToolUseChunk,
)


def activity_hint(chunk: ParsedChunk) -> str | None:
    """Return a short progress message for the chunk, or None to clear it."""

    if isinstance(chunk, SystemChunk):
        if chunk.subtype == "init":
            return "Agent initialized, processing query..."
        if chunk.subtype == "complete":
            return None
        return chunk.message or None
    if isinstance(chunk, ToolUseChunk):
        return f"Calling tool: {chunk.display_name}"
    if isinstance(chunk, ThinkingChunk):
        return "Thinking..."
    if isinstance(chunk, TodoChunk):
        for item in chunk.items:
            if item.status == "in_progress":
                return f"Executing step: {item.active_form}"
        return None
    if isinstance(chunk, ErrorChunk):
        return f"Error: {chunk.message}"
    return None
