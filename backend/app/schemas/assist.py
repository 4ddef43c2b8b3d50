"""Schemas for the writing-assist endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

EnhanceStyle = Literal["neutral", "casual", "concise"]


class EnhanceRequest(BaseModel):
    text: str = Field(min_length=1)
    style: EnhanceStyle = "neutral"


class EnhanceResult(BaseModel):
    enhanced: str


class ExpandRequest(BaseModel):
    bullets: str = Field(min_length=1)


class ExpandResult(BaseModel):
    draft: str


class SummarizeRequest(BaseModel):
    text: str = Field(min_length=1)


class SummarizeResult(BaseModel):
    tldr: str


class MetadataRequest(BaseModel):
    """Free text to mine for tags, tools, minutes and mood."""

    text: str = Field(min_length=1)


class TranscriptionResult(BaseModel):
    text: str
    duration_sec: float | None = None
