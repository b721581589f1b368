from agent_viz.config import ParserConfig
from agent_viz.stream.chunks import (
    ErrorChunk,
    SystemChunk,
    TextChunk,
    ThinkingChunk,
    TodoChunk,
    ToolResultChunk,
    ToolUseChunk,
    chunk_to_dict,
)
from agent_viz.stream.events import AssistantTextEvent
from agent_viz.stream.parser import StreamChunkParser


def _text(value: str) -> dict[str, str]:
    return {"type": "assistant_text", "text": value}


def test_accumulated_text_keeps_narration_displayed_text_does_not() -> None:
    parser = StreamChunkParser()

    first = parser.parse_chunk(_text("Let me "))
    second = parser.parse_chunk(_text("check the logs. Found 3 errors."))

    assert isinstance(first, TextChunk)
    assert first.content == ""
    assert isinstance(second, TextChunk)
    assert second.content == "Found 3 errors."
    assert second.displayed_text == "Found 3 errors."
    assert second.accumulated_text == "Let me check the logs. Found 3 errors."
    assert parser.displayed_text == "Found 3 errors."


def test_tool_result_recovers_name_from_prior_tool_use() -> None:
    parser = StreamChunkParser()

    use = parser.parse_chunk(
        {
            "type": "assistant_tool_use",
            "id": "tool-1",
            "name": "mcp__grafana__query_metrics",
            "input": {"query": "rate(errors[5m])"},
        }
    )
    result = parser.parse_chunk(
        {"type": "assistant_tool_result", "toolUseId": "tool-1", "content": "ok", "isError": False}
    )

    assert isinstance(use, ToolUseChunk)
    assert use.display_name == "query_metrics"
    assert isinstance(result, ToolResultChunk)
    assert result.name == "mcp__grafana__query_metrics"
    assert result.result == "ok"
    assert [call.id for call in parser.active_tool_calls()] == ["tool-1"]


def test_tool_result_without_tool_use_resolves_to_unknown() -> None:
    parser = StreamChunkParser()

    result = parser.parse_chunk(
        {"type": "assistant_tool_result", "tool_use_id": "missing", "content": "boom", "is_error": True}
    )

    assert isinstance(result, ToolResultChunk)
    assert result.name == "unknown"
    assert result.is_error is True


def test_todo_tool_becomes_todo_chunk() -> None:
    parser = StreamChunkParser()

    chunk = parser.parse_chunk(
        {
            "type": "assistant_tool_use",
            "id": "todo-1",
            "name": "TodoWrite",
            "input": {
                "todos": [
                    {"content": "Check logs", "status": "in_progress", "activeForm": "Checking logs"},
                    {"content": "Summarize", "status": "bogus"},
                ]
            },
        }
    )

    assert isinstance(chunk, TodoChunk)
    assert chunk.items[0].active_form == "Checking logs"
    assert chunk.items[1].status == "pending"
    assert chunk.items[1].active_form == "Summarize"
    assert parser.active_tool_calls() == []


def test_todo_tool_name_is_configurable() -> None:
    parser = StreamChunkParser(ParserConfig(todo_tool_name="Plan"))

    chunk = parser.parse_chunk({"type": "assistant_tool_use", "id": "p", "name": "Plan", "input": {}})

    assert isinstance(chunk, TodoChunk)
    assert chunk.items == ()


def test_unrecognized_chunks_return_none() -> None:
    parser = StreamChunkParser()

    assert parser.parse_chunk({"type": "mystery"}) is None
    assert parser.parse_chunk({"type": "assistant_text"}) is None
    assert parser.parse_chunk("not a chunk") is None
    assert parser.parse_chunk(None) is None


def test_system_thinking_and_error_chunks() -> None:
    parser = StreamChunkParser()

    system = parser.parse_chunk({"type": "system", "subtype": "init", "sessionId": "abc"})
    thinking = parser.parse_chunk({"type": "thinking", "text": "pondering"})
    error = parser.parse_chunk({"type": "error"})

    assert system == SystemChunk(subtype="init", session_id="abc")
    assert thinking == ThinkingChunk(content="pondering")
    assert error == ErrorChunk(message="Unknown error")


def test_result_event_flushes_held_text() -> None:
    parser = StreamChunkParser()
    parser.parse_chunk(_text("I"))

    complete = parser.parse_chunk({"type": "result"})

    assert complete == SystemChunk(subtype="complete", message="Response complete")
    assert parser.displayed_text == "I"


def test_accepts_validated_event_models() -> None:
    parser = StreamChunkParser()

    chunk = parser.parse_chunk(AssistantTextEvent(text="Hello."))

    assert isinstance(chunk, TextChunk)
    assert chunk.displayed_text == "Hello."


def test_reset_clears_turn_state() -> None:
    parser = StreamChunkParser()
    parser.parse_chunk(_text("Let me check the"))
    parser.parse_chunk({"type": "assistant_tool_use", "id": "t", "name": "search", "input": {}})

    parser.reset()

    assert parser.accumulated_text == ""
    assert parser.displayed_text == ""
    assert parser.active_tool_calls() == []
    chunk = parser.parse_chunk(_text("Fresh turn."))
    assert isinstance(chunk, TextChunk)
    assert chunk.displayed_text == "Fresh turn."


def test_chunk_to_dict_serializes_nested_items() -> None:
    parser = StreamChunkParser()
    chunk = parser.parse_chunk(
        {
            "type": "assistant_tool_use",
            "id": "todo-1",
            "name": "TodoWrite",
            "input": {"todos": [{"content": "Check logs", "status": "completed"}]},
        }
    )

    payload = chunk_to_dict(chunk)

    assert payload["kind"] == "todo"
    assert payload["items"][0]["status"] == "completed"
