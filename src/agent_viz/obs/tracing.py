"""Extraction tracing, cost accounting, and summary metrics."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from agent_viz.types import ExtractionResult


@dataclass(slots=True)
class ExtractionTraceRecord:
    trace_id: str
    timestamp_utc: str
    method: str
    fallback_used: bool
    pattern_type: str | None
    confidence: float | None
    input_chars: int
    duration_ms: float
    estimated_cost_usd: float


@dataclass(slots=True)
class CostModel:
    """Flat pricing for fallback calls (USD per call); pattern matching is free."""

    fallback_call_usd: float = 0.001

    def estimate_cost(self, fallback_used: bool) -> float:
        return self.fallback_call_usd if fallback_used else 0.0


class ExtractionTraceStore:
    """In-memory trace storage for extraction provenance."""

    def __init__(self, *, cost_model: CostModel | None = None) -> None:
        self._records: dict[str, ExtractionTraceRecord] = {}
        self._cost_model = cost_model or CostModel()

    def create_record(self, result: ExtractionResult, *, input_chars: int) -> ExtractionTraceRecord:
        trace_id = str(uuid.uuid4())
        pattern = result.pattern
        record = ExtractionTraceRecord(
            trace_id=trace_id,
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            method=result.method,
            fallback_used=result.fallback_used,
            pattern_type=pattern.type.value if pattern is not None else None,
            confidence=pattern.confidence if pattern is not None else None,
            input_chars=input_chars,
            duration_ms=result.duration_ms,
            estimated_cost_usd=self._cost_model.estimate_cost(result.fallback_used),
        )
        self._records[trace_id] = record
        return record

    def get(self, trace_id: str) -> ExtractionTraceRecord:
        record = self._records.get(trace_id)
        if record is None:
            raise KeyError(f"Trace not found: {trace_id}")
        return record

    def list_recent(self, limit: int = 20) -> list[ExtractionTraceRecord]:
        if limit <= 0:
            return []
        return list(self._records.values())[-limit:]

    def summary(self) -> dict[str, float | int]:
        """Aggregate extraction metrics for dashboard display."""
        records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_extractions": 0,
                "pattern_count": 0,
                "llm_count": 0,
                "none_count": 0,
                "fallback_rate": 0.0,
                "avg_duration_ms": 0.0,
                "p95_duration_ms": 0.0,
                "total_estimated_cost_usd": 0.0,
            }

        durations = sorted(record.duration_ms for record in records)
        p95_index = max(0, int((len(durations) * 0.95) - 1))
        fallbacks = sum(1 for record in records if record.fallback_used)

        return {
            "total_extractions": total,
            "pattern_count": sum(1 for record in records if record.method == "pattern"),
            "llm_count": sum(1 for record in records if record.method == "llm"),
            "none_count": sum(1 for record in records if record.method == "none"),
            "fallback_rate": fallbacks / total,
            "avg_duration_ms": sum(durations) / total,
            "p95_duration_ms": durations[p95_index],
            "total_estimated_cost_usd": sum(record.estimated_cost_usd for record in records),
        }


class Timer:
    """Simple context timer used around extraction calls."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0

    def split_ms(self) -> float:
        """Elapsed time so far, for early returns inside the `with` block."""
        return (time.perf_counter() - self._start) * 1000.0
