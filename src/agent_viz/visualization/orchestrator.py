"""Pattern-first extraction with an optional, bounded semantic fallback."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from agent_viz.config import ExtractionConfig
from agent_viz.obs.tracing import ExtractionTraceStore, Timer
from agent_viz.types import DataPattern, ExtractionMethod, ExtractionResult
from agent_viz.visualization.detector import PatternDetector
from agent_viz.visualization.llm_extractor import SemanticExtractor

logger = logging.getLogger(__name__)


class ExtractionOrchestrator:
    """Runs the detector and escalates to the fallback extractor when unsure.

    Fallback failures of any kind (transport, timeout, invalid payload) are
    logged and degrade to the pattern result. Cancellation is not a failure:
    it propagates so an aborted turn abandons the fallback call.
    """

    def __init__(
        self,
        *,
        detector: PatternDetector | None = None,
        fallback: SemanticExtractor | None = None,
        config: ExtractionConfig | None = None,
        trace_store: ExtractionTraceStore | None = None,
    ) -> None:
        self.detector = detector or PatternDetector()
        self.fallback = fallback
        self.config = config or ExtractionConfig()
        self.trace_store = trace_store

    async def extract(self, text: str, *, enable_fallback: bool | None = None) -> ExtractionResult:
        use_fallback = self.config.enable_llm_fallback if enable_fallback is None else enable_fallback

        with Timer() as timer:
            pattern = self.detector.best_candidate(text)
            if pattern is not None and pattern.confidence >= self.config.confidence_threshold:
                logger.info("Pattern extraction succeeded: confidence=%.2f", pattern.confidence)
                result = self._result(pattern, "pattern", False, timer.split_ms())
            elif not use_fallback or self.fallback is None:
                if pattern is not None:
                    logger.info(
                        "Pattern confidence too low (%.2f), fallback disabled", pattern.confidence
                    )
                result = self._result(pattern, _method(pattern), False, timer.split_ms())
            else:
                candidate = await self._run_fallback(self.fallback, text)
                baseline = pattern.confidence if pattern is not None else 0.0
                if candidate is not None and candidate.confidence >= baseline:
                    logger.info("LLM extraction used: confidence=%.2f", candidate.confidence)
                    result = self._result(candidate, "llm", True, timer.split_ms())
                else:
                    result = self._result(pattern, _method(pattern), True, timer.split_ms())

        self._record(result, text)
        return result

    def extract_sync(self, text: str) -> ExtractionResult:
        """Pattern-only extraction for callers that cannot await."""

        with Timer() as timer:
            pattern = self.detector.best_candidate(text)
        result = self._result(pattern, _method(pattern), False, timer.elapsed_ms)
        self._record(result, text)
        return result

    def describe(self) -> dict[str, Any]:
        """Describe the configured strategies for logging and health output."""

        fallback_ready = self.fallback is not None and self.config.enable_llm_fallback
        return {
            "primary": {"method": "pattern-based", "cost": "$0", "speed": "instant"},
            "fallback": (
                {
                    "method": "llm-based",
                    "cost": "~$0.001 per call",
                    "speed": "0.5-1s",
                    "timeout_seconds": self.config.fallback_timeout_seconds,
                }
                if fallback_ready
                else None
            ),
            "confidence_threshold": self.config.confidence_threshold,
        }

    async def _run_fallback(self, fallback: SemanticExtractor, text: str) -> DataPattern | None:
        try:
            return await asyncio.wait_for(
                fallback.extract(text),
                timeout=self.config.fallback_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Fallback extraction timed out after %.1fs", self.config.fallback_timeout_seconds
            )
        except Exception as exc:
            logger.warning("Fallback extraction failed: %s", exc)
        return None

    def _result(
        self,
        pattern: DataPattern | None,
        method: ExtractionMethod,
        fallback_used: bool,
        duration_ms: float,
    ) -> ExtractionResult:
        return ExtractionResult(
            pattern=pattern,
            method=method,
            fallback_used=fallback_used,
            duration_ms=duration_ms,
        )

    def _record(self, result: ExtractionResult, text: str) -> None:
        if self.trace_store is not None:
            self.trace_store.create_record(result, input_chars=len(text))


def format_extraction_result(result: ExtractionResult) -> str:
    """One-line summary such as `[LLM (fallback)] type=comparison, confidence=0.90, time=12ms`."""

    label = "LLM" if result.method == "llm" else "Pattern"
    suffix = " (fallback)" if result.fallback_used else ""
    if result.pattern is None:
        pattern_type, confidence = "none", "N/A"
    else:
        pattern_type = result.pattern.type.value
        confidence = f"{result.pattern.confidence:.2f}"
    return (
        f"[{label}{suffix}] type={pattern_type}, "
        f"confidence={confidence}, time={result.duration_ms:.0f}ms"
    )


def _method(pattern: DataPattern | None) -> ExtractionMethod:
    return "pattern" if pattern is not None else "none"
