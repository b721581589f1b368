"""Agent-declared `<visualization>` blocks.

An agent may append a block such as::

    <visualization>
    {"dataType": "ranking", "visualizationType": "bar",
     "title": "Top endpoints", "dataMapping": {"xAxis": "path", "yAxis": ["p95"]},
     "structuredData": [{"path": "/a", "p95": 120}, {"path": "/b", "p95": 90}]}
    </visualization>

When present it is authoritative: the declared type and field mapping are
used instead of heuristic detection.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from agent_viz.types import DataPattern, PatternMetadata, PatternType, is_scalar
from agent_viz.visualization.transformer import FieldMapping

logger = logging.getLogger(__name__)

_HINT_BLOCK = re.compile(r"<visualization>\s*(\{[\s\S]*?\})\s*</visualization>")
_ANY_HINT_BLOCK = re.compile(r"<visualization>[\s\S]*?</visualization>")

_TYPE_ALIASES = {"ranking": PatternType.COMPARISON, "breakdown": PatternType.DISTRIBUTION}

# Chart kinds an agent can request; "auto" and anything else defer to dataType.
_CHART_KINDS = {
    "area": PatternType.TIMESERIES,
    "line": PatternType.TIMESERIES,
    "bar": PatternType.COMPARISON,
    "pie": PatternType.DISTRIBUTION,
    "table": PatternType.TABLE,
}


class VisualizationHint(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    data_type: str = Field(alias="dataType", min_length=1)
    visualization_type: str = Field(alias="visualizationType", min_length=1)
    title: str | None = None
    description: str | None = None
    data_mapping: FieldMapping | None = Field(default=None, alias="dataMapping")
    structured_data: list[dict[str, Any]] = Field(alias="structuredData")


def extract_visualization_hint(text: str) -> VisualizationHint | None:
    """Parse the first `<visualization>` block, or None if absent or malformed."""

    match = _HINT_BLOCK.search(text)
    if match is None:
        return None
    try:
        return VisualizationHint.model_validate(json.loads(match.group(1)))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Ignoring malformed visualization hint: %s", exc)
        return None


def remove_visualization_hint(text: str) -> str:
    return _HINT_BLOCK.sub("", text).strip()


def has_visualization_hint(text: str) -> bool:
    return _ANY_HINT_BLOCK.search(text) is not None


def hint_to_pattern(hint: VisualizationHint) -> DataPattern:
    """Convert the hint's row records into a column-oriented pattern.

    The requested `visualizationType` picks the chart; `dataType` is used
    when the agent asked for "auto" or an unknown chart kind.
    """

    pattern_type = _CHART_KINDS.get(hint.visualization_type.lower())
    if pattern_type is None:
        pattern_type = _pattern_type_for(hint.data_type)

    columns: list[str] = []
    for record in hint.structured_data:
        for key in record:
            if key not in columns:
                columns.append(key)

    metadata = PatternMetadata(
        title=hint.title,
        description=hint.description,
        x_axis_label=hint.data_mapping.x_axis if hint.data_mapping else None,
    )

    if pattern_type is PatternType.TABLE:
        rows = [
            [_cell_text(record.get(column)) for column in columns]
            for record in hint.structured_data
        ]
        return DataPattern(
            type=pattern_type,
            confidence=1.0,
            data={"headers": columns, "rows": rows},
            metadata=metadata,
        )

    data: dict[str, Any] = {}
    for column in columns:
        values = [record.get(column) for record in hint.structured_data]
        data[column] = [value if is_scalar(value) else json.dumps(value) for value in values]
    return DataPattern(type=pattern_type, confidence=1.0, data=data, metadata=metadata)


def _pattern_type_for(data_type: str) -> PatternType:
    data_type = data_type.lower()
    try:
        return _TYPE_ALIASES.get(data_type) or PatternType(data_type)
    except ValueError:
        return PatternType.TABLE


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)
