"""Cross-chunk filter that removes planning narration from assistant text."""

from __future__ import annotations

import logging
import re
from enum import Enum

from agent_viz.config import ParserConfig

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_REGEX_META = set("()[].*+?|{}\\$^")


class FilterState(str, Enum):
    NORMAL = "normal"
    IN_PLANNING = "in_planning"


class PlanningTextFilter:
    """Stateful narration filter fed one assistant-text chunk at a time.

    A chunk whose text opens with a planning lead-in ("Let me check...",
    "Now that I have...") is dropped up to and including its first sentence
    terminator. When the terminator has not arrived yet the filter switches to
    `IN_PLANNING` and swallows text until it does. Whatever follows the
    terminator is fed back through the same checks, so several consecutive
    planning sentences inside one chunk are all removed.

    Streaming splits words arbitrarily, so a chunk can end in the middle of a
    lead-in ("Let me "). Such a fragment is held back until the next chunk
    decides it, bounded by `planning_lookahead_chars`. Call `flush` at the end
    of a response to release a fragment that never turned into narration.
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or ParserConfig()
        self._patterns = [
            re.compile(pattern, flags=re.IGNORECASE)
            for pattern in self.config.planning_patterns
        ]
        self._lead_ins = [
            prefix
            for prefix in (_literal_prefix(p) for p in self.config.planning_patterns)
            if prefix
        ]
        self._terminator = re.compile(f"[{re.escape(self.config.sentence_terminators)}]")
        self.state = FilterState.NORMAL
        self._planning_buffer = ""
        self._pending = ""

    def feed(self, text: str) -> str:
        """Filter one chunk and return the text that may be displayed."""

        if not text:
            return ""

        output: list[str] = []
        remaining = text
        while remaining:
            if self.state is FilterState.IN_PLANNING:
                self._planning_buffer += remaining
                end = self._terminator_index(self._planning_buffer)
                if end < 0:
                    break
                planning = self._planning_buffer[: end + 1]
                remaining = self._planning_buffer[end + 1 :]
                logger.debug("Filtering planning (continued): %r", planning[:60])
                self.state = FilterState.NORMAL
                self._planning_buffer = ""
            else:
                candidate = self._pending + remaining
                self._pending = ""
                if not self._starts_with_planning(candidate):
                    if self._could_start_planning(candidate):
                        self._pending = candidate
                    else:
                        output.append(candidate)
                    break
                end = self._terminator_index(candidate)
                if end < 0:
                    logger.debug("Filtering planning (spans chunks): %r", candidate.strip()[:60])
                    self.state = FilterState.IN_PLANNING
                    self._planning_buffer = candidate
                    break
                logger.debug("Filtering planning: %r", candidate[: end + 1][:60])
                remaining = candidate[end + 1 :]

            if not remaining.strip():
                break
            remaining = remaining.lstrip()

        return "".join(output)

    def flush(self) -> str:
        """Release held-back text at the end of a response.

        An unterminated planning phrase is still narration and is discarded.
        """

        released = self._pending
        self._pending = ""
        self._planning_buffer = ""
        self.state = FilterState.NORMAL
        return released

    def filter_text(self, text: str) -> str:
        """Filter a complete text in one pass."""
        return self.feed(text) + self.flush()

    def reset(self) -> None:
        self.state = FilterState.NORMAL
        self._planning_buffer = ""
        self._pending = ""

    def _starts_with_planning(self, text: str) -> bool:
        # Judged per chunk: a chunk that continues an earlier sentence can still
        # match a lead-in and be dropped.
        trimmed = text.strip()
        return any(pattern.match(trimmed) for pattern in self._patterns)

    def _could_start_planning(self, text: str) -> bool:
        if self._terminator.search(text) or "\n" in text.strip():
            return False
        normalized = _WHITESPACE.sub(" ", text.lstrip()).lower()
        if not normalized or len(normalized) > self.config.planning_lookahead_chars:
            return False
        for lead_in in self._lead_ins:
            if lead_in.startswith(normalized):
                return True
            if normalized.startswith(lead_in) and " " not in normalized[len(lead_in) :]:
                return True
        return False

    def _terminator_index(self, text: str) -> int:
        match = self._terminator.search(text)
        return match.start() if match else -1


def _literal_prefix(pattern: str) -> str:
    """Leading literal words of an anchored lead-in regex, lower-cased.

    `^Let me\\s+(check|try)` yields "let me ".
    """

    source = pattern[1:] if pattern.startswith("^") else pattern
    out: list[str] = []
    i = 0
    while i < len(source):
        if source.startswith(r"\s+", i):
            out.append(" ")
            i += 3
            continue
        if source.startswith(r"\s", i):
            out.append(" ")
            i += 2
            continue
        if source[i] in _REGEX_META:
            break
        out.append(source[i])
        i += 1
    return _WHITESPACE.sub(" ", "".join(out)).lower()
