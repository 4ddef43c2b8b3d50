"""Validate and normalize parsed model output into result shapes.

Required text fields raise ``ExtractionError``; cosmetic fields (enums,
lists, numbers) fall back to documented defaults instead.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable

from app.conversation.errors import ExtractionError
from app.schemas.log_entry import (
    DEFAULT_MINUTES,
    DEFAULT_MOOD,
    MOODS,
    TITLE_MAX_LENGTH,
    LogDraft,
    LogMetadata,
)
from app.schemas.onboarding import ExperienceLevels, OnboardingProfile, TimeAvailability

AI_EXPERIENCE_LEVELS = ("novice", "beginner", "intermediate", "advanced", "expert")
PROGRAMMING_LEVELS = ("none", "basic", "intermediate", "advanced", "expert")
MATH_LEVELS = ("basic", "college", "professional", "advanced")
LEARNING_TRACKS = (
    "generalist",
    "ml-engineer",
    "data-scientist",
    "ai-researcher",
    "product-manager",
    "entrepreneur",
)
LEARNING_PACES = ("intensive", "steady", "relaxed")
LEARNING_STYLES = ("visual", "auditory", "kinesthetic", "reading")
PROJECT_PREFERENCES = ("theory-first", "project-first", "balanced")
ACCOUNTABILITY_LEVELS = ("private", "community", "public")
TRACKING_STYLES = ("detailed", "simple")
DURATION_OPTIONS = (30, 60, 100, 180)
DEFAULT_DURATION_DAYS = 100
DEFAULT_DAILY_HOURS = 1.0

_MISSING = object()


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return _MISSING


def clean_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def clean_label(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return re.sub(r"\s+", " ", value).strip(" \t\r\n.,;\"'")


def string_list(value: Any, *, limit: int | None = None, lowercase: bool = False) -> list[str]:
    """Strings only, trimmed, de-duplicated case-insensitively, order kept."""

    if isinstance(value, str):
        value = [part for part in re.split(r"[,\n]", value)]
    if not isinstance(value, list):
        return []
    seen: set[str] = set()
    result: list[str] = []
    for item in value:
        label = clean_label(item)
        if lowercase:
            label = label.lower()
        if not label or label.lower() in seen:
            continue
        seen.add(label.lower())
        result.append(label)
        if limit is not None and len(result) >= limit:
            break
    return result


def choice(value: Any, allowed: Iterable[str], default: str) -> str:
    if isinstance(value, str):
        candidate = value.strip().lower().replace("_", "-").replace(" ", "-")
        for option in allowed:
            if candidate == option or candidate == option.replace("_", "-"):
                return option
    return default


def positive_int(value: Any) -> int | None:
    """Whole positive number from ints, floats or numeric strings."""

    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = re.search(r"\d+(?:\.\d+)?", value)
        if not match:
            return None
        value = float(match.group(0))
    if isinstance(value, (int, float)) and math.isfinite(value):
        rounded = int(round(value))
        return rounded if rounded > 0 else None
    return None


def positive_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value) and value > 0:
        return float(value)
    return None


def as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "y", "1"}:
            return True
        if lowered in {"false", "no", "n", "0"}:
            return False
    return default


def mood(value: Any, default: str | None = DEFAULT_MOOD) -> str | None:
    if isinstance(value, str) and value.strip() in MOODS:
        return value.strip()
    return default


def _require_text(data: dict[str, Any], fields: dict[str, tuple[str, ...]]) -> dict[str, str]:
    values: dict[str, str] = {}
    missing: list[str] = []
    for name, keys in fields.items():
        raw = _pick(data, *keys)
        text = clean_text(raw) if raw is not _MISSING else ""
        if text:
            values[name] = text
        else:
            missing.append(name)
    if missing:
        raise ExtractionError(
            f"Extracted object is missing required fields: {', '.join(missing)}",
            missing_fields=missing,
        )
    return values


def normalize_log_draft(data: dict[str, Any]) -> LogDraft:
    """Composer output; title, summary and content are required."""

    required = _require_text(
        data,
        {
            "title": ("title",),
            "summary": ("summary",),
            "content": ("content", "body"),
        },
    )
    title = required["title"]
    if len(title) > TITLE_MAX_LENGTH:
        title = title[: TITLE_MAX_LENGTH - 1].rstrip() + "…"
    minutes = positive_int(_pick(data, "minutes", "time_spent", "minutes_spent"))
    return LogDraft(
        title=title,
        summary=required["summary"],
        content=required["content"],
        tags=string_list(_pick(data, "tags")),
        tools=string_list(_pick(data, "tools")),
        minutes=minutes if minutes is not None else DEFAULT_MINUTES,
        mood=mood(_pick(data, "mood")),
    )


def normalize_log_metadata(data: dict[str, Any]) -> LogMetadata:
    """Metadata-only extraction; every field is optional."""

    return LogMetadata(
        tags=string_list(_pick(data, "tags"), limit=8, lowercase=True),
        tools=string_list(_pick(data, "tools"), limit=6),
        minutes=positive_int(_pick(data, "minutes")),
        mood=mood(_pick(data, "mood"), default=None),
    )


def recommend_track(experience: ExperienceLevels, current_role: str, goals: list[str]) -> str:
    """Pick a learning track from role, goals and experience."""

    role = current_role.lower()
    lowered_goals = [goal.lower() for goal in goals]
    if "product" in role or "manager" in role:
        return "product-manager"
    if "research" in role or any("research" in goal for goal in lowered_goals):
        return "ai-researcher"
    if "entrepreneur" in role or "founder" in role or any("startup" in goal for goal in lowered_goals):
        return "entrepreneur"
    if experience.programming in {"advanced", "expert"}:
        return "generalist" if experience.ai_ml in {"novice", "beginner"} else "ml-engineer"
    if "data" in role or "analyst" in role:
        return "data-scientist"
    return "generalist"


def _nearest_duration(value: Any) -> int:
    days = positive_int(value)
    if days is None:
        return DEFAULT_DURATION_DAYS
    return min(DURATION_OPTIONS, key=lambda option: (abs(option - days), option))


def _dict_or_empty(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def normalize_onboarding_profile(data: dict[str, Any]) -> OnboardingProfile:
    """Onboarding output; only the current role is required."""

    required = _require_text(data, {"current_role": ("currentRole", "current_role", "role")})

    levels_raw = _dict_or_empty(_pick(data, "experienceLevels", "experience_levels"))
    experience = ExperienceLevels(
        ai_ml=choice(_pick(levels_raw, "ai_ml", "aiMl", "ai"), AI_EXPERIENCE_LEVELS, "beginner"),
        programming=choice(_pick(levels_raw, "programming"), PROGRAMMING_LEVELS, "basic"),
        math_stats=choice(_pick(levels_raw, "math_stats", "mathStats", "math"), MATH_LEVELS, "basic"),
    )

    time_raw = _dict_or_empty(_pick(data, "timeAvailability", "time_availability"))
    daily_hours = positive_float(_pick(time_raw, "dailyHours", "daily_hours"))
    if daily_hours is None:
        weekly = positive_float(_pick(data, "weekly_hours", "availableTimePerWeek"))
        daily_hours = weekly / 7 if weekly is not None else DEFAULT_DAILY_HOURS
    time_availability = TimeAvailability(
        daily_hours=min(max(round(daily_hours, 2), 0.25), 24.0),
        weekend_learning=as_bool(_pick(time_raw, "weekendLearning", "weekend_learning")),
        preferred_times=string_list(_pick(time_raw, "preferredTimes", "preferred_times")),
        flexible_schedule=as_bool(_pick(time_raw, "flexibleSchedule", "flexible_schedule")),
    )

    goals = string_list(_pick(data, "primaryGoals", "primary_goals", "goals"))
    track_raw = _pick(data, "learningTrack", "learning_track")
    learning_track = choice(track_raw, LEARNING_TRACKS, "")
    if not learning_track:
        learning_track = recommend_track(experience, required["current_role"], goals)

    styles = [
        choice(style, LEARNING_STYLES, "")
        for style in string_list(_pick(data, "learningStyles", "learning_styles", "preferredLearningStyle"))
    ]

    return OnboardingProfile(
        current_role=required["current_role"],
        industry=clean_text(_pick(data, "industry")),
        experience_levels=experience,
        primary_goals=goals,
        learning_track=learning_track,
        time_availability=time_availability,
        learning_pace=choice(_pick(data, "learningPace", "learning_pace"), LEARNING_PACES, "steady"),
        duration_days=_nearest_duration(_pick(data, "duration_days", "durationDays")),
        motivation=string_list(_pick(data, "motivation", "motivations")),
        learning_styles=[style for style in dict.fromkeys(styles) if style],
        project_preference=choice(
            _pick(data, "projectPreference", "project_preference"), PROJECT_PREFERENCES, "balanced"
        ),
        focus_areas=string_list(_pick(data, "focusAreas", "focus_areas", "keyInterests")),
        constraints=string_list(_pick(data, "constraints")),
        accountability_level=choice(
            _pick(data, "accountabilityLevel", "accountability_level"), ACCOUNTABILITY_LEVELS, "private"
        ),
        progress_tracking_style=choice(
            _pick(data, "progressTrackingStyle", "progress_tracking_style"), TRACKING_STYLES, "simple"
        ),
        note=clean_text(_pick(data, "note")),
        weekly_hours=round(time_availability.weekly_hours, 2),
    )
