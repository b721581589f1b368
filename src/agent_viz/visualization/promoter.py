"""Promotion of date-indexed numeric tables into time-series patterns."""

from __future__ import annotations

import math
import re

from agent_viz.config import PromotionConfig
from agent_viz.types import DataPattern, PatternMetadata, PatternType

_EMPHASIS = re.compile(r"\*\*|__|~~|`|\*")
_NUMERIC_NOISE = re.compile(r"[$€£¥%,\s]")


def strip_emphasis(cell: str) -> str:
    return _EMPHASIS.sub("", cell).strip().strip("_").strip()


def parse_numeric_cell(cell: str) -> float | None:
    """Parse a table cell such as `**$1,234.50**`, `+12%` or `-3.5`."""

    text = _NUMERIC_NOISE.sub("", strip_emphasis(cell))
    if text.startswith("+"):
        text = text[1:]
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


class TableSeriesPromoter:
    """Turns a table with a temporal column and numeric columns into a series.

    Row alignment is preserved: a cell that fails to parse becomes `None`
    instead of dropping the row, so every series has one entry per table row.
    """

    def __init__(self, config: PromotionConfig | None = None) -> None:
        self.config = config or PromotionConfig()

    def is_promotable(self, headers: list[str], rows: list[list[str]]) -> bool:
        if len(headers) < 2 or len(rows) < 2:
            return False
        date_idx = self._date_column(headers)
        if date_idx is None:
            return False

        others = [i for i in range(len(headers)) if i != date_idx]
        numeric = [i for i in others if self._mostly_numeric(rows, i)]
        return bool(numeric) and len(numeric) >= len(others) * self.config.numeric_column_ratio

    def promote(
        self,
        headers: list[str],
        rows: list[list[str]],
        *,
        fallback: DataPattern | None = None,
    ) -> DataPattern:
        """Convert the table, or return `fallback` if no column is numeric."""

        table_pattern = fallback or DataPattern(
            type=PatternType.TABLE,
            confidence=self.config.table_confidence,
            data={"headers": list(headers), "rows": [list(row) for row in rows]},
            metadata=PatternMetadata(title="Data Table"),
        )
        date_idx = self._date_column(headers)
        if date_idx is None:
            return table_pattern

        date_header = strip_emphasis(headers[date_idx]) or "Date"
        data: dict[str, list[object]] = {
            date_header: [strip_emphasis(_cell(row, date_idx)) for row in rows]
        }
        for idx, header in enumerate(headers):
            if idx == date_idx or not self._mostly_numeric(rows, idx):
                continue
            name = strip_emphasis(header) or f"Column {idx + 1}"
            data[name] = [parse_numeric_cell(_cell(row, idx)) for row in rows]

        if len(data) == 1:
            return table_pattern

        return DataPattern(
            type=PatternType.TIMESERIES,
            confidence=self.config.confidence,
            data=data,
            metadata=PatternMetadata(
                title="Time Series Data",
                x_axis_label=date_header,
                y_axis_label="Value",
            ),
        )

    def _date_column(self, headers: list[str]) -> int | None:
        for idx, header in enumerate(headers):
            lowered = header.lower()
            if any(token in lowered for token in self.config.temporal_tokens):
                return idx
        return None

    def _mostly_numeric(self, rows: list[list[str]], idx: int) -> bool:
        cells = [_cell(row, idx) for row in rows]
        non_empty = [cell for cell in cells if strip_emphasis(cell)]
        if not non_empty:
            return False
        parsed = sum(1 for cell in non_empty if parse_numeric_cell(cell) is not None)
        return parsed / len(non_empty) >= self.config.numeric_cell_ratio


def _cell(row: list[str], idx: int) -> str:
    return row[idx].strip() if idx < len(row) else ""
