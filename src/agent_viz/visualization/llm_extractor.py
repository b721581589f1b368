"""Higher-cost semantic extraction backed by a chat model."""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Literal

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from agent_viz.config import ExtractionConfig
from agent_viz.types import DataPattern, PatternMetadata, PatternType, coerce_pattern_data

logger = logging.getLogger(__name__)

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

_SYSTEM_PROMPT = """
You extract structured data from text so it can be charted.

Classify the data as one of:
- timeseries: values over time
- comparison: categories with numeric values
- distribution: categories with percentage/proportion values
- table: structured tabular data

Return ONLY valid JSON with this structure:
{{
  "type": "timeseries" | "comparison" | "distribution" | "table",
  "confidence": 0.0-1.0,
  "data": {{ }},
  "metadata": {{"title": "...", "description": "...", "xAxisLabel": "...", "yAxisLabel": "..."}}
}}

Use parallel arrays for data, for example
{{"category": ["Item A", "Item B"], "value": [100, 200]}} for comparisons,
{{"date": ["2024-01-01", "2024-01-02"], "value": [100, 120]}} for time series, and
{{"headers": ["Column 1", "Column 2"], "rows": [["a", "b"], ["c", "d"]]}} for tables.
""".strip()


class FallbackExtractionError(RuntimeError):
    """The semantic extractor could not produce a valid pattern."""


class SemanticExtractor(ABC):
    """Boundary for extractors that are slower or costlier than pattern matching."""

    @abstractmethod
    async def extract(self, text: str) -> DataPattern | None:
        raise NotImplementedError


class _PayloadMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = None
    description: str | None = None
    x_axis_label: str | None = Field(default=None, alias="xAxisLabel")
    y_axis_label: str | None = Field(default=None, alias="yAxisLabel")


class ExtractionPayload(BaseModel):
    """Schema the model's JSON reply must satisfy."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["timeseries", "comparison", "distribution", "breakdown", "table"]
    confidence: float = Field(ge=0.0, le=1.0)
    data: dict[str, Any]
    metadata: _PayloadMetadata | None = None


class LLMExtractor(SemanticExtractor):
    """Asks a LangChain chat model to classify and extract data from text."""

    def __init__(self, llm: Any, config: ExtractionConfig | None = None) -> None:
        self.llm = llm
        self.config = config or ExtractionConfig()
        prompt = ChatPromptTemplate.from_messages(
            [
                ("system", _SYSTEM_PROMPT),
                ("human", "TEXT TO EXTRACT:\n{content}"),
            ]
        )
        self._chain = prompt | self.llm

    async def extract(self, text: str) -> DataPattern | None:
        content = text[: self.config.max_input_chars]
        message = await self._chain.ainvoke({"content": content})
        reply = _message_text(message)

        match = _JSON_SPAN.search(reply)
        if match is None:
            raise FallbackExtractionError("no JSON object in model reply")
        try:
            payload = ExtractionPayload.model_validate(json.loads(match.group(0)))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise FallbackExtractionError(f"invalid extraction payload: {exc}") from exc

        data = coerce_pattern_data(payload.data)
        if not data:
            return None

        # older prompts asked for "breakdown"; it charts as a distribution
        pattern_type = (
            PatternType.DISTRIBUTION if payload.type == "breakdown" else PatternType(payload.type)
        )
        if payload.metadata is not None:
            metadata = PatternMetadata(
                title=payload.metadata.title,
                description=payload.metadata.description,
                x_axis_label=payload.metadata.x_axis_label,
                y_axis_label=payload.metadata.y_axis_label,
            )
        else:
            metadata = PatternMetadata(
                title="LLM Extracted Data",
                description="Extracted using a language model",
            )

        logger.info(
            "LLM extraction succeeded: type=%s confidence=%.2f",
            pattern_type.value,
            payload.confidence,
        )
        return DataPattern(
            type=pattern_type,
            confidence=payload.confidence,
            data=data,
            metadata=metadata,
        )


def _message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts)
    return str(content)
