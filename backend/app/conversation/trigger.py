"""Heuristic deciding when a conversation has gathered enough to extract."""

from __future__ import annotations

from typing import Iterable

DEFAULT_TURN_THRESHOLD = 4

# Phrases the assistants use when they consider the conversation complete.
# Model phrasing drifts; callers always keep a manual "generate now" path.
DEFAULT_TRIGGER_PHRASES: tuple[str, ...] = (
    "enough information",
    "ready to create",
    "let me generate",
    "create your log",
)


def should_extract(
    latest_assistant_text: str | None,
    turn_count: int,
    *,
    threshold: int | None = DEFAULT_TURN_THRESHOLD,
    phrases: Iterable[str] = DEFAULT_TRIGGER_PHRASES,
) -> bool:
    """Return True when the transcript exceeds ``threshold`` messages or the
    latest assistant reply contains a trigger phrase (case-insensitive).

    ``threshold=None`` disables the count rule.
    """

    if threshold is not None and turn_count > threshold:
        return True
    lowered = (latest_assistant_text or "").lower()
    if not lowered:
        return False
    return any(phrase.lower() in lowered for phrase in phrases if phrase)
