"""Schemas for syllabus generation."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.extraction.normalizers import DEFAULT_DURATION_DAYS, string_list
from app.schemas.onboarding import OnboardingProfile


class LegacyAnswers(BaseModel):
    """Answers from the older questionnaire; unknown keys pass through to the prompt."""

    model_config = ConfigDict(extra="allow")

    duration_days: int = Field(default=DEFAULT_DURATION_DAYS, ge=1)
    goals: list[str] = Field(default_factory=list)
    experience_level: str | None = None
    weekly_hours: float | None = Field(default=None, gt=0)

    @field_validator("duration_days", mode="before")
    @classmethod
    def _default_duration(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_DURATION_DAYS
        return value

    @field_validator("goals", mode="before")
    @classmethod
    def _split_goals(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return string_list(value)
        return value


class SyllabusRequest(BaseModel):
    """Either an extracted profile or the legacy questionnaire answers."""

    profile: OnboardingProfile | None = None
    answers: LegacyAnswers | None = None

    @model_validator(mode="after")
    def _one_source(self) -> "SyllabusRequest":
        answered = self.answers is not None and bool(self.answers.model_fields_set or self.answers.model_extra)
        if self.profile is None and not answered:
            raise ValueError("Provide either profile or answers")
        return self

    def to_answers(self) -> dict[str, Any]:
        if self.profile is not None:
            return self.profile.to_syllabus_answers()
        return self.answers.model_dump(exclude_none=True) if self.answers is not None else {}


class SyllabusWeek(BaseModel):
    model_config = ConfigDict(extra="allow")

    week: int = Field(ge=1)
    theme: str = ""
    tasks: list[Any] = Field(default_factory=list)


class SyllabusTrack(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    objective: str = ""
    milestones: list[dict[str, Any]] = Field(default_factory=list)
    weeks: list[SyllabusWeek] = Field(default_factory=list)


class SyllabusPlan(BaseModel):
    """Generated plan; unknown keys from the model are kept as-is."""

    model_config = ConfigDict(extra="allow")

    title: str = Field(min_length=1)
    summary: str = ""
    duration_days: int = 100
    weekly_hours: float | None = None
    tracks: list[SyllabusTrack] = Field(min_length=1)


class SyllabusRead(BaseModel):
    """Stored syllabus row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    plan: dict[str, Any]
    created_at: datetime
