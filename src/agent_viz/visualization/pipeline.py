"""End-to-end conversion of a finished response into chart data models."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from agent_viz.types import DataPattern
from agent_viz.visualization.detector import PatternDetector
from agent_viz.visualization.hints import extract_visualization_hint, hint_to_pattern
from agent_viz.visualization.orchestrator import ExtractionOrchestrator
from agent_viz.visualization.transformer import (
    ChartDataModel,
    ChartDataTransformer,
    FieldMapping,
    TransformError,
)

logger = logging.getLogger(__name__)

VisualizationSource = Literal["hint", "pattern", "llm"]


@dataclass(frozen=True, slots=True)
class Visualization:
    chart: ChartDataModel
    pattern: DataPattern
    source: VisualizationSource

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "pattern": self.pattern.to_dict(),
            "chart": self.chart.to_dict(),
        }


class ResponseVisualizer:
    """Produces charts for a completed response in three stages.

    1. An agent-declared `<visualization>` hint, when present, wins outright.
    2. Otherwise every high-confidence pattern the detector finds is charted.
    3. If the detector surfaces nothing, the orchestrator gets a chance,
       which may escalate to the fallback extractor. Its result is still
       held to the detector's confidence floor.

    A pattern that cannot be transformed is skipped; the others still render.
    """

    def __init__(
        self,
        *,
        detector: PatternDetector | None = None,
        orchestrator: ExtractionOrchestrator | None = None,
        transformer: ChartDataTransformer | None = None,
    ) -> None:
        self.detector = detector or PatternDetector()
        self.orchestrator = orchestrator or ExtractionOrchestrator(detector=self.detector)
        self.transformer = transformer or ChartDataTransformer()

    async def visualize(self, text: str) -> list[Visualization]:
        if not text.strip():
            return []

        hint = extract_visualization_hint(text)
        if hint is not None:
            pattern = hint_to_pattern(hint)
            return self._render([(pattern, "hint")], mapping=hint.data_mapping)

        patterns = self.detector.detect(text)
        if patterns:
            return self._render([(pattern, "pattern") for pattern in patterns])

        result = await self.orchestrator.extract(text)
        if result.pattern is None or result.pattern.confidence < self.detector.config.min_confidence:
            return []
        source: VisualizationSource = "llm" if result.method == "llm" else "pattern"
        return self._render([(result.pattern, source)])

    def _render(
        self,
        candidates: list[tuple[DataPattern, VisualizationSource]],
        *,
        mapping: FieldMapping | None = None,
    ) -> list[Visualization]:
        rendered: list[Visualization] = []
        for pattern, source in candidates:
            try:
                chart = self.transformer.transform(pattern, mapping)
            except TransformError as exc:
                logger.info("Skipping %s pattern: %s", pattern.type.value, exc)
                continue
            rendered.append(Visualization(chart=chart, pattern=pattern, source=source))
        return rendered
