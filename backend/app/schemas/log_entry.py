"""Log entry draft produced by the composer."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Mood = Literal["😄", "😊", "🙂", "😐", "😕", "😫"]
MOODS: tuple[str, ...] = ("😄", "😊", "🙂", "😐", "😕", "😫")
DEFAULT_MOOD: Mood = "😐"
DEFAULT_MINUTES = 30
TITLE_MAX_LENGTH = 60


class LogDraft(BaseModel):
    """Structured daily log entry extracted from a composer conversation."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    summary: str = Field(min_length=1)
    content: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    minutes: int = Field(default=DEFAULT_MINUTES, ge=1)
    mood: Mood = DEFAULT_MOOD


class LogMetadata(BaseModel):
    """Tags, tools, time and mood pulled from free text."""

    model_config = ConfigDict(frozen=True)

    tags: list[str] = Field(default_factory=list, max_length=8)
    tools: list[str] = Field(default_factory=list, max_length=6)
    minutes: int | None = None
    mood: Mood | None = None
