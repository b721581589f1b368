from agent_viz.config import ParserConfig
from agent_viz.stream.planning import FilterState, PlanningTextFilter


def test_lead_in_split_across_chunks_is_never_displayed() -> None:
    planning = PlanningTextFilter()

    first = planning.feed("Let me ")
    second = planning.feed("check the logs. Found 3 errors.")

    assert first == ""
    assert second == "Found 3 errors."


def test_consecutive_planning_sentences_in_one_chunk_are_removed() -> None:
    planning = PlanningTextFilter()

    output = planning.feed("Let me check the logs. I'll fetch the metrics. Result is 5.")

    assert output == "Result is 5."
    assert planning.state is FilterState.NORMAL


def test_unterminated_planning_is_buffered_until_terminator() -> None:
    planning = PlanningTextFilter()

    assert planning.feed("Let me check the") == ""
    assert planning.state is FilterState.IN_PLANNING
    assert planning.feed(" logs for errors") == ""
    assert planning.feed(". Done here.") == "Done here."
    assert planning.state is FilterState.NORMAL


def test_plain_text_passes_through_unchanged() -> None:
    planning = PlanningTextFilter()
    text = "The answer is 42 and the service is healthy."

    assert planning.feed(text) == text


def test_matching_is_case_insensitive() -> None:
    planning = PlanningTextFilter()

    assert planning.filter_text("let me check the cache. Cache is warm.") == "Cache is warm."


def test_filtering_is_idempotent() -> None:
    once = PlanningTextFilter().filter_text("Let me check. Answer: 42.\nLatency is 120ms.")
    twice = PlanningTextFilter().filter_text(once)

    assert once == "Answer: 42.\nLatency is 120ms."
    assert twice == once


def test_flush_releases_fragment_that_never_became_narration() -> None:
    planning = PlanningTextFilter()

    assert planning.feed("I") == ""
    assert planning.flush() == "I"


def test_flush_discards_unterminated_planning() -> None:
    planning = PlanningTextFilter()
    planning.feed("Now let me look at the dashboards")

    assert planning.flush() == ""
    assert planning.state is FilterState.NORMAL


def test_held_fragment_is_released_when_next_chunk_is_not_planning() -> None:
    planning = PlanningTextFilter()

    assert planning.feed("I") == ""
    assert planning.feed(" think the deploy failed.") == "I think the deploy failed."


def test_custom_patterns_replace_defaults() -> None:
    planning = PlanningTextFilter(ParserConfig(planning_patterns=(r"^Hmm",)))

    assert planning.filter_text("Hmm, odd. Let me check it.") == "Let me check it."


def test_many_planning_sentences_do_not_recurse() -> None:
    planning = PlanningTextFilter()
    narration = "Let me check the logs. " * 500

    assert planning.filter_text(narration + "Done.") == "Done."


def test_reset_clears_planning_state() -> None:
    planning = PlanningTextFilter()
    planning.feed("Let me check the")
    planning.reset()

    assert planning.state is FilterState.NORMAL
    assert planning.feed("Done.") == "Done."


def test_each_chunk_is_matched_on_its_own() -> None:
    planning = PlanningTextFilter()

    first = planning.feed("We need")
    second = planning.feed(" to find the root cause. It was DNS.")

    assert first == "We need"
    assert second == "It was DNS."
