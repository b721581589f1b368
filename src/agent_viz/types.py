"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union

Scalar = Union[str, int, float, bool, None]
FieldValue = Union[Scalar, list[Any]]
PatternData = dict[str, FieldValue]

ExtractionMethod = Literal["pattern", "llm", "none"]


class PatternType(str, Enum):
    TIMESERIES = "timeseries"
    COMPARISON = "comparison"
    DISTRIBUTION = "distribution"
    TABLE = "table"


@dataclass(frozen=True, slots=True)
class PatternMetadata:
    """Display hints carried alongside a detected pattern."""

    title: str | None = None
    description: str | None = None
    x_axis_label: str | None = None
    y_axis_label: str | None = None

    def to_dict(self) -> dict[str, str]:
        payload = {
            "title": self.title,
            "description": self.description,
            "xAxisLabel": self.x_axis_label,
            "yAxisLabel": self.y_axis_label,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True, slots=True)
class DataPattern:
    """A classified, confidence-scored structured-data candidate."""

    type: PatternType
    confidence: float
    data: PatternData
    metadata: PatternMetadata = field(default_factory=PatternMetadata)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1]: {self.confidence}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "data": self.data,
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Best-effort extraction outcome with provenance for telemetry."""

    pattern: DataPattern | None
    method: ExtractionMethod
    fallback_used: bool
    duration_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern.to_dict() if self.pattern is not None else None,
            "method": self.method,
            "fallbackUsed": self.fallback_used,
            "duration": self.duration_ms,
        }


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def coerce_pattern_data(payload: Any) -> PatternData | None:
    """Validate a parsed JSON object into the pattern data container.

    Keys keep their original order. Scalars and lists of scalars are kept,
    as are lists of scalar lists (table rows). Nested objects are dropped.
    Returns None for anything that is not a mapping.
    """

    if not isinstance(payload, dict):
        return None

    data: PatternData = {}
    for key, value in payload.items():
        if is_scalar(value):
            data[str(key)] = value
        elif isinstance(value, list) and all(
            is_scalar(item)
            or (isinstance(item, list) and all(is_scalar(cell) for cell in item))
            for item in value
        ):
            data[str(key)] = list(value)
    return data
