"""Tests for validating and default-filling extracted objects."""

from __future__ import annotations

import unittest

from app.conversation.errors import ExtractionError
from app.extraction.normalizers import (
    normalize_log_draft,
    normalize_log_metadata,
    normalize_onboarding_profile,
    positive_int,
)
from app.schemas.log_entry import DEFAULT_MOOD


class LogDraftNormalizerTests(unittest.TestCase):
    def test_missing_mood_and_minutes_get_defaults(self) -> None:
        draft = normalize_log_draft({"title": "Day 3", "summary": "RAG intro", "content": "Built a retriever."})

        self.assertEqual(draft.mood, DEFAULT_MOOD)
        self.assertEqual(draft.mood, "😐")
        self.assertEqual(draft.minutes, 30)
        self.assertEqual(draft.tags, [])
        self.assertEqual(draft.tools, [])

    def test_missing_content_fails_even_when_rest_is_well_formed(self) -> None:
        with self.assertRaises(ExtractionError) as ctx:
            normalize_log_draft(
                {
                    "title": "Day 4",
                    "summary": "Embeddings",
                    "tags": ["embeddings"],
                    "tools": ["openai"],
                    "minutes": 60,
                    "mood": "😊",
                }
            )

        self.assertEqual(ctx.exception.missing_fields, ["content"])

    def test_long_title_is_truncated_and_unknown_mood_falls_back(self) -> None:
        draft = normalize_log_draft(
            {
                "title": "A" * 90,
                "summary": "s",
                "content": "c",
                "minutes": "45.6",
                "mood": "🤖",
                "tags": ["rag", 3, " ", "agents"],
            }
        )

        self.assertLessEqual(len(draft.title), 60)
        self.assertTrue(draft.title.endswith("…"))
        self.assertEqual(draft.minutes, 46)
        self.assertEqual(draft.mood, DEFAULT_MOOD)
        self.assertEqual(draft.tags, ["rag", "agents"])

    def test_positive_int_rejects_booleans_and_negatives(self) -> None:
        self.assertIsNone(positive_int(True))
        self.assertIsNone(positive_int(-5))
        self.assertIsNone(positive_int("soon"))
        self.assertEqual(positive_int(12.4), 12)


class LogMetadataNormalizerTests(unittest.TestCase):
    def test_limits_and_nullable_fields(self) -> None:
        metadata = normalize_log_metadata(
            {
                "tags": [f"Tag-{i}" for i in range(12)],
                "tools": [f"tool{i}" for i in range(10)],
                "minutes": None,
                "mood": None,
            }
        )

        self.assertEqual(len(metadata.tags), 8)
        self.assertEqual(metadata.tags[0], "tag-0")
        self.assertEqual(len(metadata.tools), 6)
        self.assertIsNone(metadata.minutes)
        self.assertIsNone(metadata.mood)


class OnboardingNormalizerTests(unittest.TestCase):
    def test_defaults_are_filled_around_required_role(self) -> None:
        profile = normalize_onboarding_profile({"currentRole": "Backend developer"})

        self.assertEqual(profile.current_role, "Backend developer")
        self.assertEqual(profile.experience_levels.ai_ml, "beginner")
        self.assertEqual(profile.experience_levels.programming, "basic")
        self.assertEqual(profile.experience_levels.math_stats, "basic")
        self.assertEqual(profile.learning_pace, "steady")
        self.assertEqual(profile.duration_days, 100)
        self.assertEqual(profile.project_preference, "balanced")
        self.assertEqual(profile.accountability_level, "private")
        self.assertEqual(profile.progress_tracking_style, "simple")
        self.assertEqual(profile.time_availability.daily_hours, 1.0)
        self.assertEqual(profile.weekly_hours, 5.0)
        self.assertEqual(profile.primary_goals, [])

    def test_weekend_learning_adds_two_days_of_hours(self) -> None:
        profile = normalize_onboarding_profile(
            {
                "currentRole": "Data analyst",
                "experienceLevels": {"ai_ml": "expert", "programming": "wizard"},
                "timeAvailability": {"dailyHours": 2, "weekendLearning": True},
                "learningTrack": "data-scientist",
                "duration_days": 90,
            }
        )

        self.assertEqual(profile.experience_levels.ai_ml, "expert")
        self.assertEqual(profile.experience_levels.programming, "basic")
        self.assertEqual(profile.weekly_hours, 14.0)
        self.assertEqual(profile.learning_track, "data-scientist")
        self.assertEqual(profile.duration_days, 100)

    def test_missing_track_is_recommended_from_role(self) -> None:
        profile = normalize_onboarding_profile({"current_role": "Product manager", "goals": ["ship AI features"]})

        self.assertEqual(profile.learning_track, "product-manager")
        self.assertEqual(profile.primary_goals, ["ship AI features"])

    def test_missing_role_fails(self) -> None:
        with self.assertRaises(ExtractionError) as ctx:
            normalize_onboarding_profile({"primaryGoals": ["learn RAG"]})

        self.assertEqual(ctx.exception.missing_fields, ["current_role"])


if __name__ == "__main__":
    unittest.main()
