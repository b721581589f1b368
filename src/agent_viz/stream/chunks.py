"""Normalized chunks emitted by the stream parser."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Union

TodoStatus = Literal["pending", "in_progress", "completed"]


@dataclass(frozen=True, slots=True)
class TextChunk:
    content: str
    accumulated_text: str
    displayed_text: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True, slots=True)
class ToolUseChunk:
    id: str
    name: str
    display_name: str
    input: dict[str, Any] = field(default_factory=dict)
    kind: Literal["tool_use"] = "tool_use"


@dataclass(frozen=True, slots=True)
class ToolResultChunk:
    tool_use_id: str
    name: str
    result: Any
    is_error: bool = False
    kind: Literal["tool_result"] = "tool_result"


@dataclass(frozen=True, slots=True)
class SystemChunk:
    subtype: str
    message: str | None = None
    session_id: str | None = None
    kind: Literal["system"] = "system"


@dataclass(frozen=True, slots=True)
class ThinkingChunk:
    content: str
    kind: Literal["thinking"] = "thinking"


@dataclass(frozen=True, slots=True)
class TodoItem:
    content: str
    status: TodoStatus
    active_form: str


@dataclass(frozen=True, slots=True)
class TodoChunk:
    items: tuple[TodoItem, ...]
    kind: Literal["todo"] = "todo"


@dataclass(frozen=True, slots=True)
class ErrorChunk:
    message: str
    kind: Literal["error"] = "error"


ParsedChunk = Union[
    TextChunk,
    ToolUseChunk,
    ToolResultChunk,
    SystemChunk,
    ThinkingChunk,
    TodoChunk,
    ErrorChunk,
]


def chunk_to_dict(chunk: ParsedChunk) -> dict[str, Any]:
    """Serialize a parsed chunk for JSON transport."""
    return asdict(chunk)
