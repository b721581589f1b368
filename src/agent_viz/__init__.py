"""Agent response processing: stream parsing and chart extraction."""

from .config import ChartConfig, DetectionConfig, ExtractionConfig, ParserConfig, PromotionConfig

__all__ = [
    "ChartConfig",
    "DetectionConfig",
    "ExtractionConfig",
    "ParserConfig",
    "PromotionConfig",
]
