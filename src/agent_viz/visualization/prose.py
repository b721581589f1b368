"""Low-confidence extraction strategies for data written as prose."""

from __future__ import annotations

import re

from agent_viz.config import DetectionConfig
from agent_viz.types import DataPattern, PatternMetadata, PatternType

_KEY_VALUE = re.compile(
    r"(?P<key>[A-Za-z][A-Za-z0-9 ]*?)\s*[:=]\s*(?P<value>-?\d[\d,]*(?:\.\d+)?)\s*%?"
)
_MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")
_MONTH_VALUE = re.compile(
    r"\b(?P<month>jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
    r"|aug(?:ust)?|sept?(?:ember)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b\.?"
    r"\s*[:=]?\s*(?P<value>-?\d[\d,]*(?:\.\d+)?)",
    flags=re.IGNORECASE,
)


def extract_key_values(text: str, config: DetectionConfig | None = None) -> DataPattern | None:
    """Extract "Error Rate: 5.2%, Success Rate: 94.8%" style pairs.

    Needs at least two pairs. Up to `key_value_distribution_threshold` pairs
    read as a comparison, more as a distribution.
    """

    config = config or DetectionConfig()
    points: dict[str, float] = {}
    for match in _KEY_VALUE.finditer(text):
        key = match.group("key").strip()
        try:
            points[key] = float(match.group("value").replace(",", ""))
        except ValueError:
            continue

    if len(points) < 2:
        return None

    pattern_type = (
        PatternType.DISTRIBUTION
        if len(points) > config.key_value_distribution_threshold
        else PatternType.COMPARISON
    )
    return DataPattern(
        type=pattern_type,
        confidence=config.key_value_confidence,
        data=dict(points),
        metadata=PatternMetadata(
            title="Data Summary",
            description="Extracted from key-value pairs",
        ),
    )


def extract_month_series(text: str, config: DetectionConfig | None = None) -> DataPattern | None:
    """Extract "Jan: 100, Feb: 200, Mar: 150" into a calendar-ordered series."""

    config = config or DetectionConfig()
    points: dict[str, float] = {}
    for match in _MONTH_VALUE.finditer(text):
        month = match.group("month").lower()[:3]
        try:
            points[month] = float(match.group("value").replace(",", ""))
        except ValueError:
            continue

    if len(points) < 2:
        return None

    months = [month for month in _MONTHS if month in points]
    return DataPattern(
        type=PatternType.TIMESERIES,
        confidence=config.month_series_confidence,
        data={
            "date": [month.capitalize() for month in months],
            "value": [points[month] for month in months],
        },
        metadata=PatternMetadata(
            title="Time Series Data",
            x_axis_label="Month",
            y_axis_label="Value",
        ),
    )
