"""Detection of visualizable data patterns in free-form agent text."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any

from agent_viz.config import DetectionConfig
from agent_viz.types import (
    DataPattern,
    PatternMetadata,
    PatternType,
    coerce_pattern_data,
    is_number,
)
from agent_viz.visualization.promoter import TableSeriesPromoter
from agent_viz.visualization.prose import extract_key_values, extract_month_series

_JSON_FENCE = re.compile(r"```json\s*\n([\s\S]*?)\n```")
_PLAIN_CELL_SPLIT = re.compile(r"\s{2,}")
_SEPARATOR_LINE = re.compile(r"^[\s\-|=+:]*$")
_BLOCK_SPLIT = re.compile(r"\n\s*\n")


class PatternDetector:
    """Finds JSON objects and tables in text and scores them as chart candidates.

    Detection is pure and holds no per-call state, so one instance can be
    shared across conversations. Malformed candidates (invalid JSON, tables
    whose column counts disagree) are skipped silently.
    """

    def __init__(
        self,
        config: DetectionConfig | None = None,
        promoter: TableSeriesPromoter | None = None,
    ) -> None:
        self.config = config or DetectionConfig()
        self.promoter = promoter or TableSeriesPromoter()
        self._prose_strategies: list[Callable[[str, DetectionConfig], DataPattern | None]] = [
            extract_key_values,
            extract_month_series,
        ]

    def detect(self, text: str) -> list[DataPattern]:
        """Return at most `max_patterns` patterns at or above `min_confidence`."""

        patterns = [
            pattern
            for pattern in self.detect_candidates(text)
            if pattern.confidence >= self.config.min_confidence
        ]
        return patterns[: self.config.max_patterns]

    def detect_candidates(self, text: str) -> list[DataPattern]:
        """Return every candidate in discovery order, without filtering."""

        if not text or not text.strip():
            return []

        candidates: list[DataPattern] = []
        for block in extract_json_objects(text):
            pattern = self.classify(block)
            if pattern is not None:
                candidates.append(pattern)

        for headers, rows in extract_markdown_tables(text):
            candidates.append(
                self._table_pattern(
                    headers,
                    rows,
                    confidence=self.config.markdown_table_confidence,
                    description=None,
                )
            )

        for headers, rows in extract_plain_text_tables(
            text,
            min_rows=self.config.min_plain_table_rows,
            tolerance=self.config.plain_table_tolerance,
        ):
            candidates.append(
                self._table_pattern(
                    headers,
                    rows,
                    confidence=self.config.plain_table_confidence,
                    description="Extracted from plain text",
                )
            )

        for strategy in self._prose_strategies:
            pattern = strategy(text, self.config)
            if pattern is not None:
                candidates.append(pattern)
        return candidates

    def best_candidate(self, text: str) -> DataPattern | None:
        """Highest-confidence candidate; the earliest one wins a tie."""

        best: DataPattern | None = None
        for pattern in self.detect_candidates(text):
            if best is None or pattern.confidence > best.confidence:
                best = pattern
        return best

    def classify(self, payload: Any) -> DataPattern | None:
        """Classify a parsed JSON object.

        Categories overlap, so the checks run in a fixed order and the first
        match wins: time-series, then distribution, then comparison.
        """

        if not isinstance(payload, dict) or len(payload) < 2:
            return None
        data = coerce_pattern_data(payload)
        if not data:
            return None

        if self._is_timeseries(payload):
            return DataPattern(
                type=PatternType.TIMESERIES,
                confidence=self.config.json_timeseries_confidence,
                data=data,
                metadata=PatternMetadata(
                    title="Time Series Data",
                    x_axis_label="Time",
                    y_axis_label="Value",
                ),
            )
        if self._is_distribution(payload):
            return DataPattern(
                type=PatternType.DISTRIBUTION,
                confidence=self.config.json_distribution_confidence,
                data=data,
                metadata=PatternMetadata(title="Distribution"),
            )
        if self._is_comparison(payload):
            return DataPattern(
                type=PatternType.COMPARISON,
                confidence=self.config.json_comparison_confidence,
                data=data,
                metadata=PatternMetadata(title="Comparison"),
            )
        return None

    def _is_timeseries(self, payload: dict[str, Any]) -> bool:
        keys = [str(key).lower() for key in payload]
        if any(token in key for key in keys for token in self.config.temporal_tokens):
            return True
        has_numeric_array = any(
            isinstance(value, list) and value and all(is_number(item) for item in value)
            for value in payload.values()
        )
        return has_numeric_array and len(payload) <= self.config.max_series_keys

    def _is_distribution(self, payload: dict[str, Any]) -> bool:
        keys = [str(key).lower() for key in payload]
        if any(token in key for key in keys for token in self.config.distribution_tokens):
            return True
        return _numeric_count(payload) >= len(payload) * self.config.distribution_numeric_ratio

    def _is_comparison(self, payload: dict[str, Any]) -> bool:
        numeric = _numeric_count(payload)
        return (
            numeric / len(payload) >= self.config.comparison_numeric_ratio
            and numeric >= self.config.min_comparison_values
        )

    def _table_pattern(
        self,
        headers: list[str],
        rows: list[list[str]],
        *,
        confidence: float,
        description: str | None,
    ) -> DataPattern:
        table = DataPattern(
            type=PatternType.TABLE,
            confidence=confidence,
            data={"headers": headers, "rows": rows},
            metadata=PatternMetadata(title="Data Table", description=description),
        )
        if self.promoter.is_promotable(headers, rows):
            return self.promoter.promote(headers, rows, fallback=table)
        return table


def extract_json_objects(text: str) -> list[dict[str, Any]]:
    """Collect JSON objects from ```json fences and a balanced-brace scan.

    The brace scan records a start offset when depth goes 0 -> 1 and parses
    the span when depth returns to 0, so `{"a": {"b": 1}, "c": 2}` comes back
    as one object. A stray `}` at depth 0 is ignored. Objects found by both
    strategies are returned once. The records of a top-level JSON array are
    skipped rather than surfaced one object at a time.
    """

    objects: list[dict[str, Any]] = []
    seen: set[str] = set()

    def _add(candidate: str) -> None:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            return
        if not isinstance(parsed, dict):
            return
        fingerprint = json.dumps(parsed, sort_keys=True, default=str)
        if fingerprint in seen:
            return
        seen.add(fingerprint)
        objects.append(parsed)

    for match in _JSON_FENCE.finditer(text):
        _add(match.group(1).strip())

    decoder = json.JSONDecoder()
    depth = 0
    start = -1
    idx = 0
    while idx < len(text):
        char = text[idx]
        if char == "[" and depth == 0:
            end = _record_array_end(decoder, text, idx)
            if end is not None:
                idx = end
                continue
        if char == "{":
            if depth == 0:
                start = idx
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start != -1:
                _add(text[start : idx + 1])
                start = -1
        idx += 1
    return objects


def _record_array_end(decoder: json.JSONDecoder, text: str, idx: int) -> int | None:
    """End offset of a JSON array of records starting at `idx`, else None."""

    try:
        value, end = decoder.raw_decode(text, idx)
    except json.JSONDecodeError:
        return None
    if isinstance(value, list) and any(isinstance(item, dict) for item in value):
        return end
    return None


def extract_markdown_tables(text: str) -> list[tuple[list[str], list[list[str]]]]:
    """Strictly parse pipe tables; partial or misaligned tables are rejected."""

    tables: list[tuple[list[str], list[list[str]]]] = []
    lines = text.split("\n")
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        if not _is_pipe_row(line) or i + 1 >= len(lines):
            i += 1
            continue

        separator = lines[i + 1].strip()
        if not separator.startswith("|") or "-" not in separator:
            i += 1
            continue

        headers = _pipe_cells(line)
        if sum(1 for cell in headers if cell) < 2:
            i += 1
            continue
        if len(_pipe_cells(separator)) != len(headers):
            i += 1
            continue

        rows: list[list[str]] = []
        j = i + 2
        while j < len(lines):
            row_line = lines[j].strip()
            if not _is_pipe_row(row_line):
                break
            cells = _pipe_cells(row_line)
            if len(cells) != len(headers):
                break
            rows.append(cells)
            j += 1

        if rows:
            tables.append((headers, rows))
            i = j
        else:
            i += 1
    return tables


def extract_plain_text_tables(
    text: str,
    *,
    min_rows: int = 2,
    tolerance: int = 1,
) -> list[tuple[list[str], list[list[str]]]]:
    """Parse whitespace-aligned tables, one per blank-line separated block.

    Columns are split on runs of two or more whitespace characters. Rows may
    be off by `tolerance` cells from the header and are padded or truncated
    to fit.
    """

    tables: list[tuple[list[str], list[list[str]]]] = []
    for block in _BLOCK_SPLIT.split(text):
        if "|" in block or "```" in block:
            continue
        lines = [line.strip() for line in block.split("\n") if line.strip()]
        if len(lines) < min_rows + 1:
            continue

        headers = _plain_cells(lines[0])
        if len(headers) < 2:
            continue

        expected = len(headers)
        rows: list[list[str]] = []
        for line in lines[1:]:
            if len(line) > 2 and _SEPARATOR_LINE.match(line):
                continue
            cells = _plain_cells(line)
            if abs(len(cells) - expected) > tolerance:
                continue
            cells = (cells + [""] * expected)[:expected]
            rows.append(cells)

        if len(rows) >= min_rows:
            tables.append((headers, rows))
    return tables


def _is_pipe_row(line: str) -> bool:
    return len(line) > 1 and line.startswith("|") and line.endswith("|")


def _pipe_cells(line: str) -> list[str]:
    inner = line.strip()
    if inner.startswith("|"):
        inner = inner[1:]
    if inner.endswith("|"):
        inner = inner[:-1]
    return [cell.strip() for cell in inner.split("|")]


def _plain_cells(line: str) -> list[str]:
    return [cell.strip() for cell in _PLAIN_CELL_SPLIT.split(line) if cell.strip()]


def _numeric_count(payload: dict[str, Any]) -> int:
    return sum(1 for value in payload.values() if is_number(value))
