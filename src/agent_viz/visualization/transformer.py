"""Renderer-agnostic chart data models and the pattern-to-chart transformer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from agent_viz.config import ChartConfig
from agent_viz.types import DataPattern, PatternData, PatternType, is_number
from agent_viz.visualization.colors import chart_color, chart_colors


class TransformError(ValueError):
    """A pattern lacks the fields needed to build a chart."""


class FieldMapping(BaseModel):
    """Explicit field selection declared by the agent alongside its data."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    x_axis: str | None = Field(default=None, alias="xAxis")
    y_axis: list[str] | None = Field(default=None, alias="yAxis")
    category: str | None = None
    value: str | None = None


@dataclass(frozen=True, slots=True)
class ChartSeries:
    name: str
    key: str
    color: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "key": self.key, "color": self.color}


@dataclass(frozen=True, slots=True)
class TimeSeriesChart:
    rows: list[dict[str, Any]]
    series: list[ChartSeries]
    kind: Literal["timeseries"] = "timeseries"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "rows": self.rows,
            "series": [series.to_dict() for series in self.series],
        }


@dataclass(frozen=True, slots=True)
class ComparisonChart:
    rows: list[dict[str, Any]]
    series: list[ChartSeries]
    kind: Literal["comparison"] = "comparison"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "rows": self.rows,
            "series": [series.to_dict() for series in self.series],
        }


@dataclass(frozen=True, slots=True)
class DistributionChart:
    rows: list[dict[str, Any]]
    category_field: str
    value_field: str
    colors: list[str] = field(default_factory=list)
    kind: Literal["distribution"] = "distribution"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "rows": self.rows,
            "categoryField": self.category_field,
            "valueField": self.value_field,
            "colors": self.colors,
        }


@dataclass(frozen=True, slots=True)
class TableChart:
    headers: list[str]
    rows: list[list[str]]
    kind: Literal["table"] = "table"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "headers": self.headers, "rows": self.rows}


ChartDataModel = Union[TimeSeriesChart, ComparisonChart, DistributionChart, TableChart]


class ChartDataTransformer:
    """Maps a classified pattern onto one of the four chart shapes.

    Field selection prefers an explicit `FieldMapping` when the fields it
    names exist in the pattern data, and falls back to heuristics otherwise:
    a temporal or string-valued key becomes the axis/category, numeric keys
    become value series. Array fields are zipped by position (short arrays
    are padded with None) and scalar fields are broadcast onto every row.
    """

    def __init__(self, config: ChartConfig | None = None) -> None:
        self.config = config or ChartConfig()

    def transform(self, pattern: DataPattern, mapping: FieldMapping | None = None) -> ChartDataModel:
        if pattern.type is PatternType.TIMESERIES:
            return self._timeseries(pattern.data, mapping)
        if pattern.type is PatternType.COMPARISON:
            return self._comparison(pattern.data, mapping)
        if pattern.type is PatternType.DISTRIBUTION:
            return self._distribution(pattern.data, mapping)
        if pattern.type is PatternType.TABLE:
            return self._table(pattern.data)
        raise TransformError(f"unsupported pattern type: {pattern.type!r}")

    def _timeseries(self, data: PatternData, mapping: FieldMapping | None) -> TimeSeriesChart:
        keys = list(data)
        if not keys:
            raise TransformError("time-series pattern has no fields")

        if mapping is not None and mapping.x_axis in data:
            x_key = mapping.x_axis
            value_keys = self._mapped_values(data, mapping, exclude=x_key)
        else:
            x_key = (
                next((key for key in keys if self._is_temporal(key)), None)
                or next((key for key in keys if _is_text_field(data[key])), None)
                or keys[0]
            )
            value_keys = [key for key in keys if key != x_key and _is_value_field(data[key])]

        if not value_keys:
            raise TransformError(f"time-series pattern has no value fields besides {x_key!r}")

        x_values = data[x_key]
        if isinstance(x_values, list):
            length = len(x_values)
        else:
            length = max(
                (len(data[key]) for key in value_keys if isinstance(data[key], list)),
                default=1,
            )

        rows: list[dict[str, Any]] = []
        for i in range(length):
            row: dict[str, Any] = {
                x_key: _at(x_values, i) if isinstance(x_values, list) else f"{x_key} {i + 1}"
            }
            for key in value_keys:
                row[key] = _at(data[key], i)
            rows.append(row)
        return TimeSeriesChart(rows=rows, series=self._series(value_keys))

    def _comparison(self, data: PatternData, mapping: FieldMapping | None) -> ComparisonChart:
        keys = list(data)
        # bar charts put categories on the x axis, so either name is accepted
        mapped = (mapping.category or mapping.x_axis) if mapping is not None else None
        if mapping is not None and mapped in data:
            category_key: str | None = mapped
            value_keys = self._mapped_values(data, mapping, exclude=mapped)
        else:
            category_key = next((key for key in keys if _is_text_field(data[key])), None)
            value_keys = [
                key for key in keys if key != category_key and _is_value_field(data[key])
            ]

        if category_key is None:
            rows = self._pivot(data)
            value_field = self.config.value_field
            return ComparisonChart(rows=rows, series=self._series([value_field]))

        if not value_keys:
            raise TransformError(f"comparison pattern has no value fields besides {category_key!r}")

        categories = data[category_key]
        if isinstance(categories, list):
            rows = []
            for i, category in enumerate(categories):
                row: dict[str, Any] = {category_key: category}
                for key in value_keys:
                    row[key] = _at(data[key], i)
                rows.append(row)
        else:
            row = {category_key: categories}
            for key in value_keys:
                row[key] = data[key]
            rows = [row]
        return ComparisonChart(rows=rows, series=self._series(value_keys))

    def _distribution(self, data: PatternData, mapping: FieldMapping | None) -> DistributionChart:
        keys = list(data)
        if mapping is not None and mapping.category in data:
            category_key: str | None = mapping.category
        else:
            category_key = next((key for key in keys if _is_text_field(data[key])), None)

        if category_key is None or not isinstance(data[category_key], list):
            rows = self._pivot(data, exclude=category_key)
            return DistributionChart(
                rows=rows,
                category_field=self.config.category_field,
                value_field=self.config.value_field,
                colors=self._colors(len(rows)),
            )

        if mapping is not None and mapping.value in data and mapping.value != category_key:
            value_key: str | None = mapping.value
        else:
            value_key = next(
                (key for key in keys if key != category_key and _is_value_field(data[key])),
                None,
            )
        if value_key is None:
            raise TransformError(f"distribution pattern has no value field besides {category_key!r}")

        categories = data[category_key]
        rows = [
            {category_key: category, value_key: _at(data[value_key], i)}
            for i, category in enumerate(categories)
        ]
        return DistributionChart(
            rows=rows,
            category_field=category_key,
            value_field=value_key,
            colors=self._colors(len(rows)),
        )

    def _table(self, data: PatternData) -> TableChart:
        headers = data.get("headers")
        rows = data.get("rows")
        if not isinstance(headers, list) or not isinstance(rows, list):
            raise TransformError("table pattern requires 'headers' and 'rows' lists")
        return TableChart(
            headers=[str(header) for header in headers],
            rows=[
                ["" if cell is None else str(cell) for cell in row]
                for row in rows
                if isinstance(row, list)
            ],
        )

    def _pivot(self, data: PatternData, exclude: str | None = None) -> list[dict[str, Any]]:
        """Turn `{"a": 1, "b": 2}` into category/value rows."""

        rows = [
            {self.config.category_field: key, self.config.value_field: value}
            for key, value in data.items()
            if key != exclude and is_number(value)
        ]
        if not rows:
            raise TransformError("pattern has no category field and no numeric values to pivot")
        return rows

    def _mapped_values(self, data: PatternData, mapping: FieldMapping, exclude: str) -> list[str]:
        if mapping.y_axis:
            return [key for key in mapping.y_axis if key in data and key != exclude]
        return [key for key in data if key != exclude and _is_value_field(data[key])]

    def _is_temporal(self, key: str) -> bool:
        lowered = key.lower()
        return any(token in lowered for token in self.config.temporal_tokens)

    def _series(self, keys: list[str]) -> list[ChartSeries]:
        return [
            ChartSeries(name=_display_name(key), key=key, color=chart_color(idx, self.config.palette))
            for idx, key in enumerate(keys)
        ]

    def _colors(self, count: int) -> list[str]:
        return chart_colors(count, self.config.palette)


def _display_name(key: str) -> str:
    return key[:1].upper() + key[1:]


def _at(value: Any, idx: int) -> Any:
    if isinstance(value, list):
        return value[idx] if idx < len(value) else None
    return value


def _is_text_field(value: Any) -> bool:
    if isinstance(value, str):
        return True
    return isinstance(value, list) and bool(value) and isinstance(value[0], str)


def _is_value_field(value: Any) -> bool:
    if is_number(value):
        return True
    return isinstance(value, list) and any(is_number(item) for item in value)
