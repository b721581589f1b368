"""Configuration models for the response processing pipeline."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PLANNING_PATTERNS: tuple[str, ...] = (
    r"^I'll\s+(check|get|try|look|fetch|query|retrieve|search|explore|update)",
    r"^Let me\s+(check|try|look|get|fetch|query|search|also|update|mark)",
    r"^Now\s+(let me|I'll|that I|let's)",
    r"^First,\s+(let me|I'll|I need)",
    r"^To\s+(answer|help|investigate|find|continue)",
    r"^Let me\s+also\s+(check|look|fetch|try|update)",
    r"^Now that I\s+(understand|have|identified|see|know)",
    r"^I should\s+(check|update|try|fetch)",
    r"^Based on.*I (can|will|should|see)",
    r"^Let's\s+(try|check|see|explore|get|fetch|update)",
    r"^I need\s+to\s+(check|try|look|fetch|continue)",
    r"^I apologize",
    r"^The\s+(build_query|API|system)",
)

DEFAULT_PALETTE: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#10b981",  # green
    "#f59e0b",  # amber
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#14b8a6",  # teal
    "#f97316",  # orange
)

TEMPORAL_TOKENS: tuple[str, ...] = ("time", "date", "hour", "day", "week", "month")


class ParserConfig(BaseModel):
    """Configures planning-narration filtering and tool correlation."""

    model_config = ConfigDict(frozen=True)

    planning_patterns: tuple[str, ...] = DEFAULT_PLANNING_PATTERNS
    sentence_terminators: str = Field(default=".!?", min_length=1)
    planning_lookahead_chars: int = Field(default=48, ge=0)
    todo_tool_name: str = "TodoWrite"
    tool_prefix_pattern: str = r"^mcp__[^_]+__"
    unknown_tool_name: str = "unknown"


class DetectionConfig(BaseModel):
    """Configures candidate discovery, classification and confidence scoring.

    The thresholds mirror the heuristics the chat client shipped with. They
    have never been calibrated against a labeled corpus.
    """

    model_config = ConfigDict(frozen=True)

    min_confidence: float = Field(default=0.75, ge=0.0, le=1.0)
    max_patterns: int = Field(default=3, ge=1)
    temporal_tokens: tuple[str, ...] = TEMPORAL_TOKENS
    distribution_tokens: tuple[str, ...] = ("percent", "distribution")
    max_series_keys: int = Field(default=5, ge=1)
    distribution_numeric_ratio: float = Field(default=0.6, ge=0.0, le=1.0)
    comparison_numeric_ratio: float = Field(default=0.7, ge=0.0, le=1.0)
    min_comparison_values: int = Field(default=2, ge=1)

    json_timeseries_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    json_distribution_confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    json_comparison_confidence: float = Field(default=0.75, ge=0.0, le=1.0)
    markdown_table_confidence: float = Field(default=0.95, ge=0.0, le=1.0)
    plain_table_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    key_value_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    month_series_confidence: float = Field(default=0.75, ge=0.0, le=1.0)

    min_plain_table_rows: int = Field(default=2, ge=1)
    plain_table_tolerance: int = Field(default=1, ge=0)
    key_value_distribution_threshold: int = Field(default=5, ge=1)


class PromotionConfig(BaseModel):
    """Configures table-to-time-series promotion."""

    model_config = ConfigDict(frozen=True)

    temporal_tokens: tuple[str, ...] = TEMPORAL_TOKENS
    numeric_cell_ratio: float = Field(default=0.7, ge=0.0, le=1.0)
    numeric_column_ratio: float = Field(default=0.5, ge=0.0, le=1.0)
    confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    table_confidence: float = Field(default=0.95, ge=0.0, le=1.0)


class ChartConfig(BaseModel):
    """Configures renderer-agnostic chart construction."""

    model_config = ConfigDict(frozen=True)

    palette: tuple[str, ...] = Field(default=DEFAULT_PALETTE, min_length=1)
    temporal_tokens: tuple[str, ...] = ("time", "date", "hour", "day")
    category_field: str = "category"
    value_field: str = "value"


class ExtractionConfig(BaseModel):
    """Configures escalation to the LLM extractor and its cost/latency bounds."""

    model_config = ConfigDict(frozen=True)

    enable_llm_fallback: bool = False
    confidence_threshold: float = Field(default=0.75, ge=0.0, le=1.0)
    fallback_timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_input_chars: int = Field(default=12000, ge=100)
