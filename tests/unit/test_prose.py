from agent_viz.config import DetectionConfig
from agent_viz.types import PatternType
from agent_viz.visualization.detector import PatternDetector
from agent_viz.visualization.prose import extract_key_values, extract_month_series


def test_key_value_pairs_become_comparison() -> None:
    pattern = extract_key_values("Error Rate: 5.2%, Success Rate: 94.8%")

    assert pattern is not None
    assert pattern.type is PatternType.COMPARISON
    assert pattern.confidence == 0.7
    assert pattern.data == {"Error Rate": 5.2, "Success Rate": 94.8}


def test_many_key_value_pairs_become_distribution() -> None:
    text = "A: 1, B: 2, C: 3, D: 4, E: 5, F: 6"

    pattern = extract_key_values(text)

    assert pattern is not None
    assert pattern.type is PatternType.DISTRIBUTION


def test_key_value_threshold_is_configurable() -> None:
    pattern = extract_key_values("A: 1, B: 2, C: 3", DetectionConfig(key_value_distribution_threshold=2))

    assert pattern is not None
    assert pattern.type is PatternType.DISTRIBUTION


def test_single_pair_is_not_enough() -> None:
    assert extract_key_values("Total: 12") is None


def test_month_series_is_ordered_by_calendar() -> None:
    pattern = extract_month_series("Mar: 150, Jan: 100, February = 1,200")

    assert pattern is not None
    assert pattern.type is PatternType.TIMESERIES
    assert pattern.confidence == 0.75
    assert pattern.data == {"date": ["Jan", "Feb", "Mar"], "value": [100.0, 1200.0, 150.0]}


def test_month_series_is_surfaced_by_detector() -> None:
    patterns = PatternDetector().detect("Signups were Jan: 100, Feb: 200, Mar: 150.")

    assert [pattern.type for pattern in patterns] == [PatternType.TIMESERIES]
