"""Syllabus generation from an onboarding profile."""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.conversation.client import ChatCompletionClient, ClientFactory, get_chat_client
from app.conversation.errors import ExtractionError
from app.conversation.instructions import load_prompt
from app.conversation.timeouts import run_with_timeout
from app.extraction.normalizers import DEFAULT_DURATION_DAYS, positive_int, string_list
from app.extraction.parsing import parse_json_object
from app.models.syllabus import Syllabus
from app.schemas.syllabus import SyllabusPlan, SyllabusRead, SyllabusTrack, SyllabusWeek

logger = logging.getLogger(__name__)

SYLLABUS_TEMPERATURE = 0.4
SYLLABUS_MAX_TOKENS = 6000

PLAN_EXAMPLE: dict[str, Any] = {
    "title": "100 Days of AI - Personalized Plan",
    "summary": "Hands-on journey building production-ready AI applications.",
    "duration_days": 100,
    "weekly_hours": 7,
    "tracks": [
        {
            "name": "Python + FastAPI Production Systems",
            "objective": "Build and deploy API systems with auth, databases and monitoring",
            "milestones": [
                {"day": 14, "title": "Local environment with Docker, FastAPI, PostgreSQL"},
                {"day": 30, "title": "Production API deployed with authentication"},
            ],
            "weeks": [
                {"week": 1, "theme": "Python Setup & FastAPI Basics", "tasks": ["Environment setup", "First API"]},
                {"week": 2, "theme": "Database Integration", "tasks": ["PostgreSQL setup", "CRUD operations"]},
            ],
        }
    ],
    "review_cadence": [{"day": 14, "focus": "Development environment and first API"}],
    "deliverables": [{"name": "Task Management API", "due_day": 14, "description": "CRUD API with Docker"}],
}


class SyllabusNotFoundError(LookupError):
    """Raised when a syllabus does not exist or belongs to someone else."""


def total_weeks(duration_days: int) -> int:
    return math.ceil(duration_days / 7)


def requested_days(answers: dict[str, Any]) -> int:
    return positive_int(answers.get("duration_days")) or DEFAULT_DURATION_DAYS


def build_prompt(answers: dict[str, Any]) -> str:
    duration = requested_days(answers)
    goals = ", ".join(string_list(answers.get("goals"))) or "AI development"
    weeks = total_weeks(duration)
    return (
        f"Create a {duration}-day learning syllabus as JSON.\n\n"
        f"User preferences: {json.dumps(answers, indent=2, ensure_ascii=False)}\n\n"
        "CRITICAL REQUIREMENTS:\n"
        f"- MUST include ALL {weeks} weeks numbered consecutively from 1 to {weeks}\n"
        "- Each week: simple theme + 2-3 brief tasks (keep it concise!)\n"
        f"- Focus on {goals}\n"
        f"- Experience level: {answers.get('experience_level') or 'intermediate'}\n"
        "- Generate COMPACT content to fit all weeks, no long descriptions\n\n"
        "Return ONLY valid JSON matching this schema:\n"
        f"{json.dumps(PLAN_EXAMPLE, indent=2)}"
    )


def pad_track_weeks(track: SyllabusTrack, weeks: int) -> SyllabusTrack:
    """Give ``track`` at least ``weeks`` entries, sorted by week number.

    A track with no weeks gets 1..weeks; otherwise missing entries are numbered
    after the highest existing week.
    """

    existing = list(track.weeks)
    if not existing:
        generated = [
            SyllabusWeek(
                week=number,
                theme=f"Week {number}: {track.name} Fundamentals",
                tasks=[
                    f"Learn {track.name.lower()} concepts",
                    "Practice with hands-on exercises",
                    "Build portfolio components",
                    "Review and prepare for next week",
                ],
            )
            for number in range(1, weeks + 1)
        ]
        return track.model_copy(update={"weeks": generated})

    missing = weeks - len(existing)
    if missing > 0:
        next_week = max(week.week for week in existing) + 1
        label = track.name.split(" ")[0]
        for offset in range(missing):
            number = next_week + offset
            existing.append(
                SyllabusWeek(
                    week=number,
                    theme=f"Week {number}: Advanced {label}",
                    tasks=[
                        f"Advanced {track.name.lower()} techniques",
                        "Apply learned concepts to real projects",
                        "Portfolio development and refinement",
                        "Prepare for final milestones",
                    ],
                )
            )
        logger.info("Padded track %r with %d generated weeks", track.name, missing)
    existing.sort(key=lambda week: week.week)
    return track.model_copy(update={"weeks": existing})


def validate_plan(value: dict[str, Any], duration_days: int, *, raw: str | None = None) -> SyllabusPlan:
    """Require ``title`` and a non-empty ``tracks`` list, then pad every track.

    ``duration_days`` on the result is the requested length, so it always
    agrees with the number of weeks per track.
    """

    try:
        plan = SyllabusPlan.model_validate(value)
    except ValidationError as exc:
        logger.warning("Generated plan is missing required fields: %s", exc)
        raise ExtractionError(
            "Generated plan is missing required fields (title, tracks)",
            cause=exc,
            raw_text=raw,
        ) from exc
    weeks = total_weeks(duration_days)
    return plan.model_copy(
        update={
            "duration_days": duration_days,
            "tracks": [pad_track_weeks(track, weeks) for track in plan.tracks],
        }
    )


async def generate_plan(
    answers: dict[str, Any],
    *,
    client: ChatCompletionClient | None = None,
    client_factory: ClientFactory | None = None,
    settings: Settings | None = None,
) -> SyllabusPlan:
    settings = settings or get_settings()
    if client is None:
        if client_factory is not None:
            client = client_factory(settings.syllabus_model)
        else:
            client = get_chat_client(settings.syllabus_model, settings=settings)
    duration = requested_days(answers)
    raw = await run_with_timeout(
        client.complete,
        [
            {"role": "system", "content": load_prompt("syllabus")},
            {"role": "user", "content": build_prompt(answers)},
        ],
        temperature=SYLLABUS_TEMPERATURE,
        max_tokens=SYLLABUS_MAX_TOKENS,
        timeout_seconds=settings.syllabus_timeout_seconds,
        operation="syllabus generation",
    )
    try:
        attempt = parse_json_object(raw)
    except ExtractionError as exc:
        logger.warning("Syllabus output failed to parse (%s); raw output: %s", exc.cause, raw[:2000])
        raise
    return validate_plan(attempt.value or {}, duration, raw=raw)


def store_syllabus(db: Session, *, user_id: str, plan: SyllabusPlan) -> SyllabusRead:
    row = Syllabus(user_id=user_id, title=plan.title, plan_json=plan.model_dump(mode="json"))
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Stored syllabus %s for user %s with %d tracks", row.id, user_id, len(plan.tracks))
    return _to_read(row)


async def create_syllabus(
    db: Session,
    *,
    user_id: str,
    answers: dict[str, Any],
    client: ChatCompletionClient | None = None,
    client_factory: ClientFactory | None = None,
    settings: Settings | None = None,
) -> SyllabusRead:
    """Generate a plan for ``answers`` and store it for ``user_id``."""

    plan = await generate_plan(answers, client=client, client_factory=client_factory, settings=settings)
    return await run_in_threadpool(store_syllabus, db, user_id=user_id, plan=plan)


def get_syllabus(db: Session, syllabus_id: int, *, user_id: str) -> SyllabusRead:
    stmt = select(Syllabus).where(Syllabus.id == syllabus_id, Syllabus.user_id == user_id)
    row = db.scalars(stmt).first()
    if row is None:
        raise SyllabusNotFoundError(f"Syllabus {syllabus_id} not found")
    return _to_read(row)


def _to_read(row: Syllabus) -> SyllabusRead:
    return SyllabusRead(id=row.id, title=row.title, plan=row.plan_json, created_at=row.created_at)
