"""Tests for syllabus generation, week padding and storage."""

from __future__ import annotations

import asyncio
import json
import threading
import unittest

from pydantic import ValidationError
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.conversation.errors import ExtractionError
from app.models import Syllabus
from app.models.base import Base
from app.schemas.onboarding import OnboardingProfile
from app.schemas.syllabus import SyllabusRequest, SyllabusTrack, SyllabusWeek
from app.services.syllabus import (
    SyllabusNotFoundError,
    build_prompt,
    create_syllabus,
    get_syllabus,
    pad_track_weeks,
    validate_plan,
)


class _StubChatClient:
    def __init__(self, raw: str) -> None:
        self.raw = raw
        self.calls: list[list[dict[str, str]]] = []
        self.kwargs: list[dict[str, object]] = []

    def complete(self, messages, *, temperature=0.7, max_tokens=None):  # noqa: ANN001
        self.calls.append(list(messages))
        self.kwargs.append({"temperature": temperature, "max_tokens": max_tokens})
        return self.raw


class _ThreadRecordingSession(Session):
    """Session that notes which thread each commit runs on."""

    def __init__(self, *args, **kwargs) -> None:  # noqa: ANN002, ANN003
        super().__init__(*args, **kwargs)
        self.commit_threads: list[int] = []

    def commit(self) -> None:
        self.commit_threads.append(threading.get_ident())
        super().commit()


class WeekPaddingTests(unittest.TestCase):
    def test_missing_weeks_are_numbered_after_highest_and_sorted(self) -> None:
        track = SyllabusTrack(
            name="Python Basics",
            weeks=[SyllabusWeek(week=3, theme="Three"), SyllabusWeek(week=1, theme="One")],
        )

        padded = pad_track_weeks(track, 5)

        self.assertEqual([week.week for week in padded.weeks], [1, 3, 4, 5, 6])
        self.assertEqual(padded.weeks[2].theme, "Week 4: Advanced Python")
        self.assertEqual(len(padded.weeks[2].tasks), 4)

    def test_track_without_weeks_gets_full_run(self) -> None:
        padded = pad_track_weeks(SyllabusTrack(name="LLM Apps"), 3)

        self.assertEqual([week.week for week in padded.weeks], [1, 2, 3])
        self.assertEqual(padded.weeks[0].theme, "Week 1: LLM Apps Fundamentals")

    def test_complete_track_is_left_alone(self) -> None:
        track = SyllabusTrack(name="Data", weeks=[SyllabusWeek(week=2), SyllabusWeek(week=1)])

        padded = pad_track_weeks(track, 2)

        self.assertEqual([week.week for week in padded.weeks], [1, 2])

    def test_validation_requires_title_and_tracks(self) -> None:
        with self.assertRaises(ExtractionError):
            validate_plan({"title": "Plan", "tracks": []}, 30)
        with self.assertRaises(ExtractionError):
            validate_plan({"tracks": [{"name": "x"}]}, 30)

    def test_validation_pads_every_track_and_keeps_extra_keys(self) -> None:
        plan = validate_plan(
            {
                "title": "30 Days",
                "tracks": [{"name": "A", "weeks": [{"week": 1, "theme": "t", "tasks": ["x"]}]}, {"name": "B"}],
                "deliverables": [{"name": "Demo", "due_day": 30}],
            },
            30,
        )

        self.assertEqual([len(track.weeks) for track in plan.tracks], [5, 5])
        self.assertEqual(plan.model_dump()["deliverables"], [{"name": "Demo", "due_day": 30}])

    def test_validated_plan_reports_requested_duration(self) -> None:
        plan = validate_plan({"title": "Plan", "duration_days": 100, "tracks": [{"name": "A"}]}, 60)

        self.assertEqual(plan.duration_days, 60)
        self.assertEqual(len(plan.tracks[0].weeks), 9)


class SyllabusPromptTests(unittest.TestCase):
    def test_prompt_uses_profile_answers(self) -> None:
        answers = OnboardingProfile(current_role="Analyst", primary_goals=["forecasting"], duration_days=60).to_syllabus_answers()

        prompt = build_prompt(answers)

        self.assertIn("Create a 60-day learning syllabus", prompt)
        self.assertIn("MUST include ALL 9 weeks", prompt)
        self.assertIn("Focus on forecasting", prompt)

    def test_prompt_coerces_loose_legacy_answers(self) -> None:
        prompt = build_prompt({"duration_days": "60", "goals": "rag apps, agents"})

        self.assertIn("Create a 60-day learning syllabus", prompt)
        self.assertIn("MUST include ALL 9 weeks", prompt)
        self.assertIn("Focus on rag apps, agents", prompt)

    def test_unusable_duration_falls_back_to_default(self) -> None:
        prompt = build_prompt({"duration_days": "soon", "goals": None})

        self.assertIn("Create a 100-day learning syllabus", prompt)
        self.assertIn("Focus on AI development", prompt)


class LegacyAnswersTests(unittest.TestCase):
    def test_string_values_are_coerced(self) -> None:
        request = SyllabusRequest.model_validate(
            {"answers": {"duration_days": "60", "goals": "rag apps\nagents", "tone": "playful"}}
        )

        self.assertEqual(
            request.to_answers(),
            {"duration_days": 60, "goals": ["rag apps", "agents"], "tone": "playful"},
        )

    def test_non_numeric_duration_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            SyllabusRequest.model_validate({"answers": {"duration_days": "two months"}})

    def test_empty_answers_are_not_a_source(self) -> None:
        with self.assertRaises(ValidationError):
            SyllabusRequest.model_validate({"answers": {}})


class SyllabusStorageTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(
            bind=cls.engine,
            class_=_ThreadRecordingSession,
            autoflush=False,
            autocommit=False,
            future=True,
        )
        Base.metadata.create_all(cls.engine)

    @classmethod
    def tearDownClass(cls) -> None:
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        self.db: _ThreadRecordingSession = self.SessionLocal()
        self.db.execute(delete(Syllabus))
        self.db.commit()
        self.db.commit_threads.clear()

    def tearDown(self) -> None:
        self.db.close()

    def test_generated_plan_is_stored_for_owner(self) -> None:
        raw = "```json\n" + json.dumps(
            {
                "title": "14 Days of RAG",
                "summary": "Short sprint",
                "duration_days": 14,
                "tracks": [{"name": "RAG", "weeks": [{"week": 1, "theme": "Embeddings", "tasks": ["a"]}]}],
            }
        ) + "\n```"
        client = _StubChatClient(raw)

        created = asyncio.run(
            create_syllabus(
                self.db,
                user_id="user-1",
                answers={"duration_days": 14, "goals": ["rag"]},
                client=client,
                settings=Settings(openai_api_key="test-key"),
            )
        )

        self.assertEqual(created.title, "14 Days of RAG")
        self.assertEqual([w["week"] for w in created.plan["tracks"][0]["weeks"]], [1, 2])
        self.assertEqual(client.kwargs[0], {"temperature": 0.4, "max_tokens": 6000})

        fetched = get_syllabus(self.db, created.id, user_id="user-1")
        self.assertEqual(fetched.plan, created.plan)
        with self.assertRaises(SyllabusNotFoundError):
            get_syllabus(self.db, created.id, user_id="someone-else")

    def test_generated_duration_is_overridden_and_row_written_off_loop(self) -> None:
        raw = json.dumps({"title": "Plan", "duration_days": 100, "tracks": [{"name": "Core"}]})

        async def _create() -> tuple[int, object]:
            created = await create_syllabus(
                self.db,
                user_id="user-1",
                answers={"duration_days": 21},
                client=_StubChatClient(raw),
                settings=Settings(openai_api_key="test-key"),
            )
            return threading.get_ident(), created

        loop_thread, created = asyncio.run(_create())

        self.assertEqual(created.plan["duration_days"], 21)
        self.assertEqual(len(created.plan["tracks"][0]["weeks"]), 3)
        self.assertTrue(self.db.commit_threads)
        self.assertNotIn(loop_thread, self.db.commit_threads)


if __name__ == "__main__":
    unittest.main()
