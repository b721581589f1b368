"""Series color assignment shared by every chart shape."""

from __future__ import annotations

from collections.abc import Sequence

from agent_viz.config import DEFAULT_PALETTE


def chart_color(index: int, palette: Sequence[str] = DEFAULT_PALETTE) -> str:
    """Color for the series at `index`, wrapping around the palette."""
    return palette[index % len(palette)]


def chart_colors(count: int, palette: Sequence[str] = DEFAULT_PALETTE) -> list[str]:
    return [chart_color(i, palette) for i in range(count)]
