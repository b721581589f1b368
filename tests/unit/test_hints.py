import json

from agent_viz.types import PatternType
from agent_viz.visualization.hints import (
    extract_visualization_hint,
    has_visualization_hint,
    hint_to_pattern,
    remove_visualization_hint,
)

_HINT = {
    "dataType": "ranking",
    "visualizationType": "bar",
    "title": "Top Movies",
    "dataMapping": {"xAxis": "title", "yAxis": ["popularityScore"]},
    "structuredData": [
        {"title": "Movie A", "popularityScore": 345, "rating": 8.2},
        {"title": "Movie B", "popularityScore": 298, "rating": 7.5},
    ],
}


def _response(payload: object) -> str:
    return f"Here are the results.\n<visualization>\n{json.dumps(payload)}\n</visualization>"


def test_extract_hint_parses_mapping_and_rows() -> None:
    hint = extract_visualization_hint(_response(_HINT))

    assert hint is not None
    assert hint.data_type == "ranking"
    assert hint.data_mapping is not None
    assert hint.data_mapping.x_axis == "title"
    assert hint.data_mapping.y_axis == ["popularityScore"]
    assert len(hint.structured_data) == 2


def test_hint_to_pattern_pivots_rows_into_columns() -> None:
    hint = extract_visualization_hint(_response(_HINT))
    assert hint is not None

    pattern = hint_to_pattern(hint)

    assert pattern.type is PatternType.COMPARISON
    assert pattern.confidence == 1.0
    assert pattern.data == {
        "title": ["Movie A", "Movie B"],
        "popularityScore": [345, 298],
        "rating": [8.2, 7.5],
    }
    assert pattern.metadata.title == "Top Movies"


def test_table_hint_builds_string_rows() -> None:
    hint = extract_visualization_hint(
        _response(
            {
                "dataType": "table",
                "visualizationType": "table",
                "structuredData": [{"a": 1, "b": "x"}, {"b": "y"}],
            }
        )
    )
    assert hint is not None

    pattern = hint_to_pattern(hint)

    assert pattern.type is PatternType.TABLE
    assert pattern.data == {"headers": ["a", "b"], "rows": [["1", "x"], ["", "y"]]}


def test_unknown_data_type_falls_back_to_table() -> None:
    hint = extract_visualization_hint(
        _response({"dataType": "scatter", "visualizationType": "auto", "structuredData": [{"x": 1}]})
    )
    assert hint is not None

    assert hint_to_pattern(hint).type is PatternType.TABLE


def test_malformed_or_incomplete_hints_are_ignored() -> None:
    missing_rows = {"dataType": "comparison", "visualizationType": "bar"}

    assert extract_visualization_hint("<visualization>{not json}</visualization>") is None
    assert extract_visualization_hint(_response(missing_rows)) is None
    assert extract_visualization_hint("No hint here.") is None


def test_remove_and_has_hint() -> None:
    text = _response(_HINT)

    assert has_visualization_hint(text)
    assert remove_visualization_hint(text) == "Here are the results."
    assert not has_visualization_hint("plain answer")


def test_requested_chart_kind_overrides_data_type() -> None:
    payload = {
        "dataType": "comparison",
        "visualizationType": "pie",
        "structuredData": [{"service": "auth", "errors": 245}, {"service": "payment", "errors": 89}],
    }
    hint = extract_visualization_hint(_response(payload))
    assert hint is not None

    assert hint_to_pattern(hint).type is PatternType.DISTRIBUTION


def test_auto_chart_kind_defers_to_data_type() -> None:
    hint = extract_visualization_hint(
        _response({"dataType": "breakdown", "visualizationType": "auto", "structuredData": [{"x": 1}]})
    )
    assert hint is not None

    assert hint_to_pattern(hint).type is PatternType.DISTRIBUTION
