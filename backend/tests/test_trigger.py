"""Tests for the completion trigger heuristic."""

from __future__ import annotations

import unittest

from app.conversation.trigger import should_extract


class CompletionTriggerTests(unittest.TestCase):
    def test_fifth_message_with_phrase_fires(self) -> None:
        self.assertTrue(should_extract("Great, I have enough information to build your plan!", 5))

    def test_three_messages_without_phrase_does_not_fire(self) -> None:
        self.assertFalse(should_extract("What did you build today?", 3))

    def test_count_must_strictly_exceed_threshold(self) -> None:
        self.assertFalse(should_extract("Tell me more.", 4, threshold=4))
        self.assertTrue(should_extract("Tell me more.", 5, threshold=4))

    def test_phrase_match_is_case_insensitive(self) -> None:
        self.assertTrue(should_extract("LET ME GENERATE that entry.", 2))

    def test_phrase_alone_fires_when_count_rule_disabled(self) -> None:
        self.assertFalse(should_extract("Anything else?", 40, threshold=None))
        self.assertTrue(should_extract("I'm ready to create your log.", 2, threshold=None))

    def test_custom_phrases_replace_defaults(self) -> None:
        self.assertFalse(should_extract("enough information", 1, phrases=("all set",)))
        self.assertTrue(should_extract("We're all set!", 1, phrases=("all set",)))


if __name__ == "__main__":
    unittest.main()
