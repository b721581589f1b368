"""FastAPI entrypoint for extraction, visualization and stream replay endpoints."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from agent_viz.config import ExtractionConfig
from agent_viz.obs.tracing import ExtractionTraceStore
from agent_viz.stream.chunks import chunk_to_dict
from agent_viz.stream.events import split_sdk_message
from agent_viz.stream.hints import activity_hint
from agent_viz.stream.parser import StreamChunkParser
from agent_viz.visualization.detector import PatternDetector
from agent_viz.visualization.hints import remove_visualization_hint
from agent_viz.visualization.llm_extractor import LLMExtractor
from agent_viz.visualization.orchestrator import (
    ExtractionOrchestrator,
    format_extraction_result,
)
from agent_viz.visualization.pipeline import ResponseVisualizer
from agent_viz.visualization.stripper import strip_visualized_content

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


def _create_llm() -> Any:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        return None

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"), temperature=0)


class ExtractRequest(BaseModel):
    content: str = Field(min_length=1)
    enable_llm_fallback: bool | None = None


class VisualizeRequest(BaseModel):
    content: str = Field(min_length=1)


class StreamParseRequest(BaseModel):
    chunks: list[dict[str, Any]] = Field(default_factory=list)
    strip_visualized: bool = False


app = FastAPI(title="Agent Response Visualization", version="0.1.0")

_extraction_config = ExtractionConfig(
    enable_llm_fallback=os.getenv("ENABLE_LLM_EXTRACTION", "false").lower() == "true",
)
_detector = PatternDetector()
_trace_store = ExtractionTraceStore()
_llm = _create_llm()
_orchestrator = ExtractionOrchestrator(
    detector=_detector,
    fallback=LLMExtractor(_llm, _extraction_config) if _llm is not None else None,
    config=_extraction_config,
    trace_store=_trace_store,
)
_visualizer = ResponseVisualizer(detector=_detector, orchestrator=_orchestrator)


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "llm_configured": _llm is not None,
        "extraction": _orchestrator.describe(),
        "trace_count": len(_trace_store.list_recent(limit=1000)),
    }


@app.post("/extract")
async def extract(request: ExtractRequest) -> dict[str, Any]:
    try:
        result = await _orchestrator.extract(
            request.content,
            enable_fallback=request.enable_llm_fallback,
        )
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    logger.info(format_extraction_result(result))
    return result.to_dict()


@app.post("/visualize")
async def visualize(request: VisualizeRequest) -> dict[str, Any]:
    try:
        items = await _visualizer.visualize(request.content)
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"items": [item.to_dict() for item in items]}


@app.post("/stream/parse")
def stream_parse(request: StreamParseRequest) -> dict[str, Any]:
    parser = StreamChunkParser()
    parsed: list[dict[str, Any]] = []
    hints: list[str] = []
    for raw in request.chunks:
        for event in split_sdk_message(raw):
            chunk = parser.parse_chunk(event)
            if chunk is None:
                continue
            parsed.append(chunk_to_dict(chunk))
            hint = activity_hint(chunk)
            if hint:
                hints.append(hint)
    parser.flush()

    displayed = parser.displayed_text
    if request.strip_visualized:
        displayed = strip_visualized_content(remove_visualization_hint(displayed))

    return {
        "chunks": parsed,
        "displayed_text": displayed,
        "accumulated_text": parser.accumulated_text,
        "hints": hints,
        "tool_calls": [chunk_to_dict(call) for call in parser.active_tool_calls()],
    }


@app.get("/traces")
def traces(limit: int = 20) -> dict[str, Any]:
    records = [asdict(record) for record in _trace_store.list_recent(limit=limit)]
    return {"items": records}


@app.get("/traces/{trace_id}")
def trace_detail(trace_id: str) -> dict[str, Any]:
    try:
        record = _trace_store.get(trace_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return asdict(record)


@app.get("/metrics")
def metrics() -> dict[str, Any]:
    return _trace_store.summary()
